"""Error taxonomy for the instance identity resolver.

Errors fall into two groups:
- Per-identity errors (ParseError and subclasses) that the resolver logs
  and skips, so the rest of a batch still resolves.
- Batch-fatal errors (ConfigError, RemoteCallError, CancellationError)
  that abort the whole resolve call and surface to the caller.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from botocore.exceptions import ClientError


class IIDError(Exception):
    """Base exception for resolver errors.

    Usage:
        raise IIDError("not configured")
        raise IIDError("lookup failed", details={"region": "us-east-1"})
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable error payload."""
        payload: Dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return f"aws-iid: {self.message}"


class ParseError(IIDError):
    """Raised when an agent ID cannot be used by this resolver."""

    def __init__(self, message: str, agent_id: str):
        super().__init__(message, details={"agent_id": agent_id})
        self.agent_id = agent_id


class InvalidAgentIDError(ParseError):
    """The string is not a valid agent identity at all."""

    def __init__(self, agent_id: str, reason: str):
        super().__init__(f"unable to parse agent id {agent_id!r}: {reason}", agent_id)
        self.reason = reason


class MalformedAgentIDError(ParseError):
    """A valid agent identity that does not carry account/region/instance."""

    def __init__(self, agent_id: str):
        super().__init__(f"malformed agent id {agent_id!r}", agent_id)


class ConfigError(IIDError):
    """Raised for missing, incomplete or undecodable configuration."""


class RemoteCallError(IIDError):
    """Raised when an AWS API call fails during resolution."""

    def __init__(self, operation: str, agent_id: str, cause: Exception):
        code = error_code(cause)
        details = {"operation": operation, "agent_id": agent_id}
        if code:
            details["code"] = code
        super().__init__(f"{operation} failed for {agent_id}: {cause}", details=details)
        self.operation = operation
        self.agent_id = agent_id
        self.code = code


class CancellationError(IIDError):
    """Raised when the caller cancels a request or its deadline passes."""

    def __init__(self, message: str = "request cancelled"):
        super().__init__(message)


def error_code(exc: Exception) -> Optional[str]:
    """Extract the AWS error code from a botocore ClientError, if any."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "Unknown")
    return None
