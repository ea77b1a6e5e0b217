"""In-memory snapshot cache with idle expiry and per-key single-flight loads."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger("status_overview.cache")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_TTL_SECONDS = 180.0


@dataclass
class _Entry(Generic[V]):
    value: V
    accessed_at: float


class SnapshotCache(Generic[K, V]):
    """Expire-after-access cache keyed by status category.

    A miss starts one load task for that key; every caller arriving while
    it runs awaits the same task and sees its value, its ``None`` or its
    exception. The task is dropped once it settles, and only a non-``None``
    value is stored, so the next miss after a failure loads again. Keys
    never wait on each other.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[K, _Entry[V]] = {}
        self._inflight: dict[K, asyncio.Task] = {}

    def _touch(self, key: K) -> Optional[_Entry[V]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        now = self._clock()
        if now - entry.accessed_at > self._ttl:
            logger.debug("Snapshot %s idle for %.1fs; evicting", key, now - entry.accessed_at)
            del self._entries[key]
            return None
        entry.accessed_at = now
        return entry

    async def _load(self, key: K, compute: Callable[[], Awaitable[Optional[V]]]) -> Optional[V]:
        started = time.monotonic()
        try:
            value = await compute()
        except Exception:
            logger.info("Snapshot %s failed after %dms", key, int((time.monotonic() - started) * 1000))
            raise
        finally:
            self._inflight.pop(key, None)
        elapsed_ms = int((time.monotonic() - started) * 1000)
        if value is None:
            logger.info("Snapshot %s computed in %dms with no payload; not cached", key, elapsed_ms)
            return None
        self._entries[key] = _Entry(value=value, accessed_at=self._clock())
        logger.info("Snapshot %s computed in %dms", key, elapsed_ms)
        return value

    async def get(self, key: K, compute: Callable[[], Awaitable[Optional[V]]]) -> Optional[V]:
        entry = self._touch(key)
        if entry is not None:
            return entry.value

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._load(key, compute))
            self._inflight[key] = task
        else:
            logger.debug("Snapshot %s already loading; waiting", key)
        # A cancelled caller must not cancel the load other callers share.
        return await asyncio.shield(task)

    def peek(self, key: K) -> Optional[V]:
        """Return a live value without refreshing its idle timer."""
        entry = self._entries.get(key)
        if entry is None or self._clock() - entry.accessed_at > self._ttl:
            return None
        return entry.value

    def clear(self) -> None:
        self._entries.clear()
