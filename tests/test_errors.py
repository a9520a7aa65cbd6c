"""Tests for iidresolver.errors module."""

from __future__ import annotations

from botocore.exceptions import ClientError

from iidresolver.errors import (
    CancellationError,
    ConfigError,
    IIDError,
    InvalidAgentIDError,
    MalformedAgentIDError,
    ParseError,
    RemoteCallError,
    error_code,
)


class TestErrorHierarchy:
    """Tests for the exception hierarchy."""

    def test_all_errors_share_base(self):
        for cls in (ParseError, ConfigError, RemoteCallError, CancellationError):
            assert issubclass(cls, IIDError)

    def test_parse_errors(self):
        assert issubclass(InvalidAgentIDError, ParseError)
        assert issubclass(MalformedAgentIDError, ParseError)
        assert not issubclass(ConfigError, ParseError)

    def test_str_carries_prefix(self):
        assert str(ConfigError("not configured")) == "aws-iid: not configured"


class TestIIDError:
    """Tests for error payloads."""

    def test_to_dict_without_details(self):
        assert ConfigError("not configured").to_dict() == {"error": "not configured"}

    def test_to_dict_with_details(self):
        error = MalformedAgentIDError("spiffe://x/spire/agent/other")

        assert error.to_dict() == {
            "error": "malformed agent id 'spiffe://x/spire/agent/other'",
            "details": {"agent_id": "spiffe://x/spire/agent/other"},
        }

    def test_invalid_agent_id_reason(self):
        error = InvalidAgentIDError("bad", "invalid scheme")

        assert error.reason == "invalid scheme"
        assert "unable to parse agent id 'bad'" in error.message


class TestRemoteCallError:
    """Tests for RemoteCallError."""

    def test_client_error_code(self):
        cause = ClientError({"Error": {"Code": "Throttling", "Message": "slow down"}}, "DescribeInstances")

        error = RemoteCallError("DescribeInstances", "spiffe://x/a", cause)

        assert error.code == "Throttling"
        assert error.details == {
            "operation": "DescribeInstances",
            "agent_id": "spiffe://x/a",
            "code": "Throttling",
        }
        assert "DescribeInstances failed for spiffe://x/a" in str(error)

    def test_other_error_has_no_code(self):
        error = RemoteCallError("GetInstanceProfile", "spiffe://x/a", RuntimeError("boom"))

        assert error.code is None
        assert "code" not in error.details

    def test_error_code_helper(self):
        assert error_code(ValueError("x")) is None
        assert error_code(ClientError({"Error": {}}, "Op")) == "Unknown"
