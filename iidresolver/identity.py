"""Agent ID parsing.

Agent IDs are SPIFFE IDs of the form:

    spiffe://<trust-domain>/spire/agent/aws_iid/<account>/<region>/<instance>

Any trust domain is accepted. Only the account, region and instance ID
segments are extracted.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from .constants import AGENT_ID_PATH_PATTERN, AGENT_PATH_PREFIX, SPIFFE_SCHEME
from .errors import InvalidAgentIDError, MalformedAgentIDError


@dataclass(frozen=True)
class AgentIdentity:
    """Account, region and instance named by an agent ID."""
    account_id: str
    region: str
    instance_id: str
    trust_domain: str = ""


def parse_agent_id(agent_id: str) -> AgentIdentity:
    """Parse an agent ID into its AWS coordinates.

    Args:
        agent_id: SPIFFE ID of the agent

    Returns:
        AgentIdentity with account, region and instance ID

    Raises:
        InvalidAgentIDError: If the string is not a valid agent SPIFFE ID
        MalformedAgentIDError: If the agent path is not an aws_iid path
    """
    if not agent_id:
        raise InvalidAgentIDError(agent_id, "empty")
    if any(ord(ch) < 0x21 or ord(ch) == 0x7f for ch in agent_id):
        raise InvalidAgentIDError(agent_id, "invalid control character")

    try:
        parts = urlsplit(agent_id)
        port = parts.port
    except ValueError as exc:
        raise InvalidAgentIDError(agent_id, str(exc)) from exc

    if parts.scheme.lower() != SPIFFE_SCHEME:
        raise InvalidAgentIDError(agent_id, "invalid scheme")
    if not parts.hostname:
        raise InvalidAgentIDError(agent_id, "trust domain is empty")
    if parts.username is not None or parts.password is not None:
        raise InvalidAgentIDError(agent_id, "user info is not allowed")
    if port is not None:
        raise InvalidAgentIDError(agent_id, "port is not allowed")
    if parts.query or parts.fragment or agent_id.endswith(("?", "#")):
        raise InvalidAgentIDError(agent_id, "query and fragment are not allowed")
    if not parts.path.startswith(AGENT_PATH_PREFIX):
        raise InvalidAgentIDError(agent_id, "not an agent id")

    match = AGENT_ID_PATH_PATTERN.match(parts.path)
    if match is None:
        raise MalformedAgentIDError(agent_id)

    account_id, region, instance_id = match.groups()
    return AgentIdentity(
        account_id=account_id,
        region=region,
        instance_id=instance_id,
        trust_domain=parts.hostname,
    )
