from datetime import datetime
from typing import Any, Dict

from ..forms.schemas import EventForm
from ..microservices import events
from ..schemas import Event
from .base import EntityDrawer


class EventDrawer(EntityDrawer):
    entity = "events"
    path = "events"
    label = "Event"
    form_cls = EventForm
    record_cls = Event
    has_poster = True

    def defaults(self) -> Dict[str, Any]:
        now = datetime.now().replace(second=0, microsecond=0)
        return {
            "name": "",
            "date": now,
            "meeting_name": "",
            "meeting_time": now,
            "meeting_location": "",
            "details": "",
            "is_major": False,
            "poster": "",
            "is_open": False,
        }

    async def fetch(self, uid: str) -> Dict[str, Any]:
        return await events.get_event_by_uid(self.client, self.token, uid)

    async def create(self, values: Dict[str, Any]) -> Any:
        return await events.create_event(self.client, self.token, values)

    async def update(self, uid: str, values: Dict[str, Any]) -> Any:
        return await events.update_event_by_uid(self.client, self.token, uid, values)
