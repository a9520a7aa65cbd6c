"""Base class for node resolver plugins."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..context import RequestContext

logger = logging.getLogger(__name__)

SelectorMap = Dict[str, List[Dict[str, str]]]


@dataclass
class PluginInfo:
    """Metadata about a plugin."""
    name: str
    version: str
    description: str
    author: str = ""
    dependencies: List[str] = field(default_factory=list)
    homepage: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "author": self.author,
            "homepage": self.homepage,
        }


class NodeResolver(ABC):
    """Host-facing contract for node resolvers.

    A node resolver maps agent IDs to the selectors describing the node
    they run on. Hosts call configure once (and again whenever settings
    change) and resolve for every batch of agent IDs.

    Example implementation:

        class StaticResolver(NodeResolver):
            @property
            def info(self) -> PluginInfo:
                return PluginInfo(name="static", version="1.0.0",
                                  description="Fixed selectors")

            def configure(self, payload) -> None:
                self.selectors = decode(payload)

            def resolve(self, agent_ids, ctx=None) -> SelectorMap:
                return {agent_id: self.selectors for agent_id in agent_ids}
    """

    @property
    @abstractmethod
    def info(self) -> PluginInfo:
        """Return plugin metadata."""
        pass

    @abstractmethod
    def configure(self, payload: Union[str, bytes, Mapping[str, Any], None]) -> None:
        """Install configuration.

        Args:
            payload: Plugin configuration document

        Raises:
            ConfigError: If the configuration is rejected
        """
        pass

    @abstractmethod
    def resolve(
        self, agent_ids: Iterable[str], ctx: Optional[RequestContext] = None
    ) -> SelectorMap:
        """Resolve agent IDs to selectors.

        Args:
            agent_ids: Agent SPIFFE IDs
            ctx: Request context carrying cancellation

        Returns:
            Mapping of agent ID to selector dicts for IDs that resolved
        """
        pass

    def get_plugin_info(self) -> PluginInfo:
        """Return plugin metadata to the host."""
        return self.info

    def __repr__(self) -> str:
        return f"<NodeResolver {self.info.name} v{self.info.version}>"
