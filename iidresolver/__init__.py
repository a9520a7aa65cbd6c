"""iidresolver - AWS instance identity node resolver.

Resolves agent IDs issued for EC2 instances into authorization selectors:
- Instance tags (tag:<key>:<value>)
- Security groups (sg:id:<id>, sg:name:<name>)
- Roles of the attached IAM instance profile (iamrole:<arn>)
"""

__version__ = "0.1.0"

from iidresolver.errors import (
    IIDError,
    ParseError,
    InvalidAgentIDError,
    MalformedAgentIDError,
    ConfigError,
    RemoteCallError,
    CancellationError,
)
from iidresolver.identity import AgentIdentity, parse_agent_id
from iidresolver.normalizers import Selector, normalize_selectors
from iidresolver.context import RequestContext
from iidresolver.collectors import RegionClientCache
from iidresolver.resolver import InstanceResolver
from iidresolver.plugins import IIDResolverPlugin, NodeResolver, PluginInfo

__all__ = [
    # Version info
    "__version__",
    # Errors
    "IIDError",
    "ParseError",
    "InvalidAgentIDError",
    "MalformedAgentIDError",
    "ConfigError",
    "RemoteCallError",
    "CancellationError",
    # Resolution
    "AgentIdentity",
    "parse_agent_id",
    "Selector",
    "normalize_selectors",
    "RequestContext",
    "RegionClientCache",
    "InstanceResolver",
    # Plugin
    "IIDResolverPlugin",
    "NodeResolver",
    "PluginInfo",
]
