"""AWS client construction and the per-region client cache."""

from .cache import ReadWriteLock, RegionClientCache
from .session import AWSRegionClient, RegionClient, create_session, new_aws_client

__all__ = [
    "AWSRegionClient",
    "ReadWriteLock",
    "RegionClient",
    "RegionClientCache",
    "create_session",
    "new_aws_client",
]
