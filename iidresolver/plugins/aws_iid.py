"""AWS instance identity node resolver plugin."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from .. import __version__
from ..collectors.cache import ClientFactory, RegionClientCache
from ..collectors.session import new_aws_client
from ..config import Settings, decode_configuration, get_settings
from ..constants import PLUGIN_NAME
from ..context import RequestContext
from ..resolver import InstanceResolver
from .base import NodeResolver, PluginInfo, SelectorMap

logger = logging.getLogger(__name__)


class IIDResolverPlugin(NodeResolver):
    """Resolves aws_iid agents to instance tags, security groups and roles.

    Usage:
        plugin = IIDResolverPlugin()
        plugin.configure('{"access_key_id": "...", "secret_access_key": "..."}')
        selectors = plugin.resolve([agent_id])

    Hooks:
        getenv: Environment lookup for credential defaults
        client_factory: Builds a region client from (config, region)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        getenv: Callable[[str], Optional[str]] = os.getenv,
        client_factory: ClientFactory = new_aws_client,
    ):
        self.settings = settings or get_settings()
        self._getenv = getenv
        self.cache = RegionClientCache(client_factory=client_factory)
        self.resolver = InstanceResolver(self.cache, max_workers=self.settings.max_workers)

    @property
    def info(self) -> PluginInfo:
        return PluginInfo(
            name=PLUGIN_NAME,
            version=__version__,
            description="Resolves AWS instance identity agents to EC2 and IAM selectors",
            dependencies=["boto3"],
        )

    def configure(self, payload: Union[str, bytes, Mapping[str, Any], None]) -> None:
        config = decode_configuration(payload).with_env_defaults(self._getenv)
        config.validate_credentials()
        self.cache.reconfigure(config)
        logger.info(f"Configured {PLUGIN_NAME} resolver with {config!r}")

    def resolve(
        self, agent_ids: Iterable[str], ctx: Optional[RequestContext] = None
    ) -> SelectorMap:
        if ctx is None:
            ctx = RequestContext(timeout=self.settings.request_timeout)
        resolved = self.resolver.resolve_all(agent_ids, ctx)
        return {
            agent_id: [selector.to_dict() for selector in selectors]
            for agent_id, selectors in resolved.items()
        }
