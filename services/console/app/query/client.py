import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)

QueryKey = Tuple[Hashable, ...]
QueryFn = Callable[[], Awaitable[Any]]


def make_key(key: Any) -> QueryKey:
    return key if isinstance(key, tuple) else (key,)


@dataclass
class QueryState:
    """Cached result and fetch flags for one query key."""

    status: str = "idle"  # idle | loading | success | error
    data: Any = None
    error: Optional[BaseException] = None
    is_fetching: bool = False
    is_invalidated: bool = False
    updated_at: Optional[float] = None
    last_used: float = field(default_factory=time.monotonic)
    _inflight: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def is_loading(self) -> bool:
        """True while the first fetch is still running (no data yet)."""
        return self.status == "loading"

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    def is_stale(self, stale_time: float) -> bool:
        """With ``stale_time`` 0 data is stale as soon as it arrives."""
        if self.status != "success" or self.is_invalidated or self.updated_at is None:
            return True
        return (time.monotonic() - self.updated_at) >= stale_time


class QueryClient:
    """
    Per-session query cache.

    Created when a session signs in and cleared when it signs out. Data is
    served from the cache for ``stale_time`` seconds (never, by default) and
    re-fetched after that or once invalidated. Concurrent fetches of one key
    share a single task, so a caller that is cancelled doesn't strand the
    others. Queries nobody read for ``cache_time`` seconds are dropped.
    """

    def __init__(self, stale_time: float = 0.0, cache_time: float = 300.0):
        self.stale_time = stale_time
        self.cache_time = cache_time
        self._queries: Dict[QueryKey, QueryState] = {}

    def get_query_state(self, key: Any) -> QueryState:
        """State for ``key``; an unknown key reads as idle and is not stored."""
        return self._queries.get(make_key(key)) or QueryState()

    def _state(self, key: Any) -> QueryState:
        state = self._queries.setdefault(make_key(key), QueryState())
        state.last_used = time.monotonic()
        return state

    def get_query_data(self, key: Any) -> Any:
        state = self._queries.get(make_key(key))
        if state is None:
            return None
        state.last_used = time.monotonic()
        return state.data

    def set_query_data(self, key: Any, data: Any) -> None:
        state = self._state(key)
        state.data = data
        state.status = "success"
        state.error = None
        state.is_invalidated = False
        state.updated_at = time.monotonic()

    async def fetch_query(self, key: Any, fn: QueryFn, force: bool = False) -> Any:
        """
        Cached data while it is fresh, otherwise the result of ``fn``.

        ``force`` skips the freshness check but still joins a fetch that is
        already running for the key.
        """
        self.collect_garbage()
        state = self._state(key)
        if not force and not state.is_stale(self.stale_time):
            return state.data
        if state._inflight is None:
            state.is_fetching = True
            if state.status != "success":
                state.status = "loading"
            state._inflight = asyncio.ensure_future(self._run(state, fn))
        return await asyncio.shield(state._inflight)

    async def _run(self, state: QueryState, fn: QueryFn) -> Any:
        try:
            data = await fn()
        except Exception as e:
            state.status = "error"
            state.error = e
            raise
        else:
            state.data = data
            state.status = "success"
            state.error = None
            state.is_invalidated = False
            state.updated_at = time.monotonic()
            return data
        finally:
            state.is_fetching = False
            state._inflight = None

    async def wait_for_query(self, key: Any) -> Any:
        """Wait out any fetch running for ``key`` and return what it left in the cache."""
        state = self._queries.get(make_key(key))
        if state is None:
            return None
        while state._inflight is not None:
            await asyncio.shield(state._inflight)
        return state.data

    async def prefetch_query(self, key: Any, fn: QueryFn) -> None:
        try:
            await self.fetch_query(key, fn)
        except Exception as e:
            logger.warning(f"Prefetch of {make_key(key)} failed: {e}")

    def invalidate_queries(self, namespace: Hashable) -> int:
        """Mark every query whose key starts with ``namespace`` as stale."""
        count = 0
        for key, state in self._queries.items():
            if key[0] == namespace:
                state.is_invalidated = True
                count += 1
        logger.debug(f"Invalidated {count} queries under {namespace!r}")
        return count

    def remove_queries(self, namespace: Hashable) -> None:
        for key in [k for k in self._queries if k[0] == namespace]:
            del self._queries[key]

    def collect_garbage(self) -> int:
        """Drop idle queries that were not used for ``cache_time`` seconds."""
        now = time.monotonic()
        expired = [
            key for key, state in self._queries.items()
            if state._inflight is None and now - state.last_used >= self.cache_time
        ]
        for key in expired:
            del self._queries[key]
        if expired:
            logger.debug(f"Dropped {len(expired)} unused queries")
        return len(expired)

    async def mutate(self, fn: Callable[..., Awaitable[Any]], *args, on_success: Optional[Callable[[Any], Any]] = None, **kwargs) -> Any:
        """
        Run a mutation. ``on_success`` runs only when ``fn`` succeeds;
        failures propagate to the caller untouched.
        """
        result = await fn(*args, **kwargs)
        if on_success is not None:
            on_success(result)
        return result

    def clear(self) -> None:
        for state in self._queries.values():
            if state._inflight is not None:
                state._inflight.cancel()
        self._queries.clear()

    def __len__(self) -> int:
        return len(self._queries)
