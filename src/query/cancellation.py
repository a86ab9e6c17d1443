# src/query/cancellation.py — v1
"""Cooperative cancellation for long-running traversals.

The engine checks the token between BFS layers, so cancellation takes
effect at the next layer boundary rather than mid-fetch.
"""

from __future__ import annotations

import asyncio
import time

from kgtraverse.query.errors import QueryCancelledError


class CancellationToken:
    """Cancellation signal combining an asyncio.Event and an optional deadline.

    Args:
        event: Event the caller sets to cancel. A fresh one is created if None.
        deadline: Absolute time.monotonic() value after which the query is
            considered timed out. None = no deadline.
    """

    def __init__(
        self,
        event: asyncio.Event | None = None,
        deadline: float | None = None,
    ) -> None:
        self._event = event or asyncio.Event()
        self._deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> CancellationToken:
        """Token that expires ``seconds`` from now."""
        if seconds <= 0:
            raise ValueError("timeout must be > 0")
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._event.set()

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def raise_if_cancelled(self, operation: str) -> None:
        """Raise QueryCancelledError if cancelled or past the deadline."""
        if self.cancelled:
            raise QueryCancelledError(operation, "cancelled")
        if self.expired:
            raise QueryCancelledError(operation, "timed out")
