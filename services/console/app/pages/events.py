from typing import Any, Dict

from ..microservices import events
from ..schemas import Event
from .listing import ListPage


class EventsPage(ListPage):
    namespace = "events:search"
    record_cls = Event

    async def run_search(self, filters: Dict[str, Any], limit: int) -> Dict[str, Any]:
        return await events.search_events(self.client, self.token, filters, limit)
