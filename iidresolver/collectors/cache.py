"""Lazily built, per-region AWS client cache.

The cache owns the active resolver configuration and one client per
region built from it. Lookups take a shared read lock; insertion and
reconfiguration take the exclusive write lock. Reconfiguring drops every
cached client so no later lookup sees a client built from superseded
credentials.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from ..config import ResolverConfig
from ..errors import ConfigError, IIDError
from .session import RegionClient, new_aws_client

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ResolverConfig, str], RegionClient]


class ReadWriteLock:
    """Writer-preferring reader/writer lock.

    Any number of readers may hold the lock together. A writer waits for
    active readers to leave and blocks new readers while it waits, so a
    steady stream of lookups cannot starve reconfiguration.

    The lock is not reentrant; a reader must release before writing.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class RegionClientCache:
    """Registry of region clients for the active configuration.

    Usage:
        cache = RegionClientCache()
        cache.reconfigure(ResolverConfig(access_key_id="...", secret_access_key="..."))
        client = cache.get_or_create("us-west-2")
    """

    def __init__(self, client_factory: ClientFactory = new_aws_client):
        self._lock = ReadWriteLock()
        self._config: Optional[ResolverConfig] = None
        self._clients: Dict[str, RegionClient] = {}
        self._client_factory = client_factory

    @property
    def configured(self) -> bool:
        """Return whether a configuration has been installed."""
        with self._lock.read_locked():
            return self._config is not None

    @property
    def regions(self) -> List[str]:
        """Return regions with a cached client."""
        with self._lock.read_locked():
            return sorted(self._clients)

    def reconfigure(self, config: ResolverConfig) -> None:
        """Install a new configuration and discard every cached client.

        Clients already handed out stay usable by their holders.

        Args:
            config: Validated resolver configuration
        """
        with self._lock.write_locked():
            dropped = len(self._clients)
            self._config = config
            self._clients = {}
        logger.info(f"Resolver reconfigured; dropped {dropped} cached region client(s)")

    def get_or_create(self, region: str) -> RegionClient:
        """Return the client for a region, building it on first use.

        Args:
            region: AWS region name

        Returns:
            Region client shared by every caller in this configuration epoch

        Raises:
            ConfigError: If not configured or the client cannot be built
        """
        with self._lock.read_locked():
            client = self._clients.get(region)
        if client is not None:
            return client

        with self._lock.write_locked():
            # Another caller may have built it between the two locks.
            client = self._clients.get(region)
            if client is not None:
                return client

            if self._config is None:
                raise ConfigError("not configured")

            try:
                client = self._client_factory(self._config, region)
            except IIDError:
                raise
            except Exception as e:
                raise ConfigError(f"unable to create client for region {region}: {e}") from e

            self._clients[region] = client
            logger.debug(f"Cached client for region {region}")
            return client

    def __repr__(self) -> str:
        return f"<RegionClientCache configured={self._config is not None} regions={len(self._clients)}>"
