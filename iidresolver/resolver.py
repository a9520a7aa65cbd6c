"""Instance resolution.

Resolves agent IDs to the selectors describing their EC2 instance:
tags, security groups and the roles of the attached instance profile.

Failure policy:
- A malformed agent ID is logged and skipped; the rest of the batch
  still resolves.
- Configuration and AWS API failures abort the whole batch. A partial
  selector set is worse than no answer for authorization decisions.
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from .collectors.cache import RegionClientCache
from .constants import INSTANCE_STATES
from .context import RequestContext
from .errors import IIDError, ParseError, RemoteCallError
from .identity import parse_agent_id
from .normalizers.selectors import (
    Selector,
    normalize_selectors,
    resolve_instance,
    resolve_instance_profile,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InstanceResolver:
    """Resolves agent IDs through a shared region client cache.

    Usage:
        resolver = InstanceResolver(cache)
        selectors = resolver.resolve_all(["spiffe://example.org/spire/agent/aws_iid/..."])
    """

    def __init__(self, cache: RegionClientCache, max_workers: int = 1):
        """Initialize the resolver.

        Args:
            cache: Region client cache holding the active configuration
            max_workers: Agent IDs resolved concurrently within one batch
        """
        self.cache = cache
        self.max_workers = max(1, max_workers)

    def resolve(self, agent_id: str, ctx: Optional[RequestContext] = None) -> Optional[List[Selector]]:
        """Resolve one agent ID.

        Args:
            agent_id: Agent SPIFFE ID
            ctx: Request context carrying cancellation

        Returns:
            Sorted selectors, or None if the ID is not resolvable or no
            pending/running instance matched

        Raises:
            ConfigError: If the resolver is not configured
            RemoteCallError: If an AWS call fails
            CancellationError: If the request was cancelled
        """
        ctx = ctx or RequestContext()
        ctx.check()

        try:
            identity = parse_agent_id(agent_id)
        except ParseError as e:
            logger.warning(f"Unrecognized agent ID: {agent_id}: {e.message}")
            return None

        client = self.cache.get_or_create(identity.region)

        instances = self._call(
            ctx, "DescribeInstances", agent_id,
            client.describe_instances, identity.instance_id, INSTANCE_STATES,
        )
        if not instances:
            logger.debug(f"No pending or running instance for {agent_id}")
            return None

        values: List[str] = []
        for instance in instances:
            values.extend(resolve_instance(instance))
            profile_arn = (instance.get("IamInstanceProfile") or {}).get("Arn")
            if profile_arn:
                roles = self._call(
                    ctx, "GetInstanceProfile", agent_id,
                    client.get_instance_profile, profile_arn,
                )
                values.extend(resolve_instance_profile(roles))

        return normalize_selectors(values)

    def resolve_all(
        self, agent_ids: Iterable[str], ctx: Optional[RequestContext] = None
    ) -> Dict[str, List[Selector]]:
        """Resolve a batch of agent IDs.

        Args:
            agent_ids: Agent SPIFFE IDs
            ctx: Request context carrying cancellation

        Returns:
            Mapping of agent ID to selectors, for IDs that resolved

        Raises:
            ConfigError: If the resolver is not configured
            RemoteCallError: If any AWS call fails
            CancellationError: If the request was cancelled
        """
        ctx = ctx or RequestContext()
        unique_ids = list(dict.fromkeys(agent_ids))

        if self.max_workers == 1 or len(unique_ids) <= 1:
            results = {agent_id: self.resolve(agent_id, ctx) for agent_id in unique_ids}
        else:
            results = self._resolve_concurrently(unique_ids, ctx)

        resolved = {agent_id: selectors for agent_id, selectors in results.items() if selectors is not None}
        logger.debug(f"Resolved {len(resolved)} of {len(unique_ids)} agent IDs")
        return resolved

    def _resolve_concurrently(
        self, agent_ids: List[str], ctx: RequestContext
    ) -> Dict[str, Optional[List[Selector]]]:
        batch_ctx = ctx.child()
        pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="iidresolver")
        try:
            futures = {agent_id: pool.submit(self.resolve, agent_id, batch_ctx) for agent_id in agent_ids}
            done, _ = wait(futures.values(), return_when=FIRST_EXCEPTION)
            for future in done:
                error = future.exception()
                if error is not None:
                    # Stop the remaining lookups at their next checkpoint.
                    batch_ctx.cancel()
                    raise error
            return {agent_id: future.result() for agent_id, future in futures.items()}
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

    @staticmethod
    def _call(
        ctx: RequestContext,
        operation: str,
        agent_id: str,
        fn: Callable[..., T],
        *args: Any,
    ) -> T:
        ctx.check()
        # A call abandoned on cancellation keeps its thread until botocore's
        # own timeouts end it.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="iidresolver-call")
        try:
            result = ctx.wait_for(executor.submit(fn, *args))
        except IIDError:
            raise
        except Exception as e:
            logger.error(f"{operation} failed for {agent_id}: {e}")
            raise RemoteCallError(operation, agent_id, e) from e
        finally:
            executor.shutdown(wait=False)
        ctx.check()
        return result
