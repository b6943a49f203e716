"""
Process-wide query cache.

Entries are keyed by semantic query identity: (resource, kind, params). An
entry is fresh for `stale_time` seconds after it was written, unless a
mutation invalidated its resource family first. Concurrent fetches of the same
key share one in-flight request.

Each family also carries an invalidation generation. A fetch records the
generation when it starts; if the family was invalidated while the request was
in flight, the response is stored already marked stale.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

QueryKey = Tuple[Any, ...]


def make_key(resource: str, kind: str, params: Optional[Dict[str, Any]] = None) -> QueryKey:
    """Build a hashable key; parameter order does not matter."""
    return (resource, kind, tuple(sorted((params or {}).items())))


@dataclass
class CacheEntry:
    data: Any
    updated_at: float
    invalidated: bool = False


class QueryCache:

    def __init__(self, stale_time: float = 30.0, clock: Callable[[], float] = time.monotonic):
        self.stale_time = stale_time
        self._clock = clock
        self._entries: Dict[QueryKey, CacheEntry] = {}
        self._inflight: Dict[QueryKey, asyncio.Future] = {}
        self._generations: Dict[str, int] = {}

    def get(self, key: QueryKey) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def generation(self, family: str) -> int:
        return self._generations.get(family, 0)

    def set(self, key: QueryKey, data: Any, generation: Optional[int] = None) -> None:
        """
        Store `data` under `key`.

        `generation` is the family generation observed when the request for
        `data` started; a mismatch means a mutation landed in between.
        """
        invalidated = generation is not None and generation != self.generation(key[0])
        self._entries[key] = CacheEntry(data=data, updated_at=self._clock(), invalidated=invalidated)

    def remove(self, key: QueryKey) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def is_stale(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.invalidated:
            return True
        return self._clock() - entry.updated_at >= self.stale_time

    def is_fetching(self, key: QueryKey) -> bool:
        return key in self._inflight

    def keys(self, family: Optional[str] = None) -> Iterable[QueryKey]:
        return [k for k in self._entries if family is None or k[0] == family]

    def invalidate(self, family: str) -> int:
        """
        Mark every entry of a resource family stale.

        Data is kept so it can still be shown while the refetch runs. Requests
        of the family already in flight will store their result as stale.
        Returns the number of entries marked.
        """
        self._generations[family] = self.generation(family) + 1

        count = 0
        for key in self.keys(family):
            self._entries[key].invalidated = True
            count += 1
        if count:
            logger.debug(f"Invalidated {count} cached queries for {family}")
        return count

    async def fetch(
        self,
        key: QueryKey,
        fetcher: Callable[[], Awaitable[Any]],
        *,
        force: bool = False
    ) -> Any:
        """
        Return cached data while fresh, otherwise fetch and store it.

        A second caller arriving while a fetch for the same key is running
        awaits that fetch instead of issuing its own request. Cancelling one
        caller does not cancel the request the others are waiting on.
        """
        if not force and not self.is_stale(key):
            return self._entries[key].data

        task = self._inflight.get(key)
        if task is None:
            generation = self.generation(key[0])
            task = asyncio.ensure_future(fetcher())
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._settle(key, t, generation))

        return await asyncio.shield(task)

    def _settle(self, key: QueryKey, task: asyncio.Future, generation: int) -> None:
        self._inflight.pop(key, None)
        if task.cancelled():
            return
        if task.exception() is not None:
            logger.debug(f"Fetch for {key} failed: {task.exception()!r}")
            return
        self.set(key, task.result(), generation=generation)
