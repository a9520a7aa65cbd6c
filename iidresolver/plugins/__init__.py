"""Node resolver plugins.

A plugin exposes configure, resolve and get_plugin_info to its host.
The host transport is not part of this package; plugins are plain
Python objects that any host can wrap.
"""

from .base import NodeResolver, PluginInfo
from .aws_iid import IIDResolverPlugin

__all__ = [
    "NodeResolver",
    "PluginInfo",
    "IIDResolverPlugin",
]
