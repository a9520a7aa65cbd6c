"""Per-request cancellation and deadline handling."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, wait
from typing import Any, Optional

from .constants import CANCEL_POLL_INTERVAL
from .errors import CancellationError


class RequestContext:
    """Cancellation signal passed through a resolve call.

    The context is shared by every lookup made on behalf of one request.
    Cancelling it, or letting its deadline pass, makes the next check
    raise CancellationError.

    Example:
        >>> ctx = RequestContext(timeout=5)
        >>> plugin.resolve(agent_ids, ctx)
    """

    def __init__(self, timeout: Optional[float] = None, parent: Optional["RequestContext"] = None):
        """Initialize the context.

        Args:
            timeout: Seconds until the request expires, or None for no deadline
            parent: Context whose cancellation and deadline also apply
        """
        self._cancelled = threading.Event()
        self._parent = parent
        self.deadline = time.monotonic() + timeout if timeout is not None else None
        if parent is not None and parent.deadline is not None:
            if self.deadline is None or parent.deadline < self.deadline:
                self.deadline = parent.deadline

    def child(self) -> "RequestContext":
        """Derive a context that can be cancelled without cancelling this one."""
        return RequestContext(parent=self)

    def cancel(self) -> None:
        """Signal cancellation to every holder of this context."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._parent is not None and self._parent.cancelled:
            return True
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self) -> None:
        """Raise if the request should stop.

        Raises:
            CancellationError: If cancelled or past the deadline
        """
        if self.cancelled:
            raise CancellationError("request cancelled")
        if self.expired:
            raise CancellationError("request deadline exceeded")

    def wait_for(self, future: Future, poll_interval: float = CANCEL_POLL_INTERVAL) -> Any:
        """Wait for a future's result while the request is still live.

        The future is abandoned, not cancelled, once the request stops:
        its thread runs on until the underlying call returns.

        Args:
            future: Pending result of a call running on another thread
            poll_interval: Seconds between cancellation checks

        Returns:
            The future's result

        Raises:
            CancellationError: If cancelled or past the deadline first
        """
        while True:
            self.check()
            remaining = self.remaining()
            timeout = poll_interval if remaining is None else min(poll_interval, remaining)
            done, _ = wait([future], timeout=timeout)
            if done:
                return future.result()

    def __repr__(self) -> str:
        return f"<RequestContext cancelled={self.cancelled} remaining={self.remaining()}>"
