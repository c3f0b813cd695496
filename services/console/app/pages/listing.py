from typing import Any, Dict, List, Type

from pydantic import BaseModel

from ..config.settings import settings
from ..query.client import QueryClient
from ..utils.debounce import Debouncer
from ..utils.http_client import MicroserviceClient


class ListPage:
    """
    Search/list screen state: the debounced search string and the page size.

    The search query key carries both, so a change to either one is a new
    query. Every render re-runs the search unless QUERY_STALE_TIME says the
    cached result is still fresh.
    """

    namespace: str = ""
    record_cls: Type[BaseModel] = BaseModel

    def __init__(
        self,
        client: MicroserviceClient,
        query_client: QueryClient,
        token: str,
        debounce_seconds: float = None,
        limit: int = None,
    ):
        self.client = client
        self.query_client = query_client
        self.token = token
        self.search_text = ""
        self.search = ""
        self.limit = limit or settings.SEARCH_LIMIT
        delay = settings.SEARCH_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        self.debouncer = Debouncer(delay, initial="")

    async def run_search(self, filters: Dict[str, Any], limit: int) -> Dict[str, Any]:
        raise NotImplementedError

    @property
    def filters(self) -> Dict[str, Any]:
        return {"filters": {"search": self.search}, "limit": self.limit}

    @property
    def query_key(self) -> tuple:
        return (self.namespace, self.search, self.limit)

    async def on_search(self, text: str) -> bool:
        """
        Record a keystroke. Returns ``True`` when ``text`` settled and became
        the active search, ``False`` when a newer keystroke superseded it.
        """
        text = (text or "").strip()
        self.search_text = text
        if text == self.search:
            self.debouncer.supersede(text)
            return True
        settled, value = await self.debouncer.settle(text)
        if settled:
            self.search = value
        return settled

    def set_limit(self, limit: int) -> None:
        if limit and limit > 0:
            self.limit = limit

    async def results(self) -> List[BaseModel]:
        filters, limit = self.filters, self.limit
        response = await self.query_client.fetch_query(
            self.query_key, lambda: self.run_search(filters, limit)
        )
        return self._records(response)

    def cached_results(self) -> List[BaseModel]:
        """Whatever the last search left in the cache, without fetching."""
        return self._records(self.query_client.get_query_data(self.query_key))

    def _records(self, response: Any) -> List[BaseModel]:
        items = (response or {}).get("data") or []
        return [self.record_cls.model_validate(item) for item in items]

    async def prefetch(self) -> None:
        filters, limit = self.filters, self.limit
        await self.query_client.prefetch_query(self.query_key, lambda: self.run_search(filters, limit))

    @property
    def is_loading(self) -> bool:
        return self.query_client.get_query_state(self.query_key).is_loading
