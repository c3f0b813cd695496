from typing import Any, Dict

from ..forms.schemas import AnnouncementForm
from ..microservices import announcements
from ..schemas import Announcement
from .base import EntityDrawer


class AnnouncementDrawer(EntityDrawer):
    entity = "announcements"
    path = "announcements"
    label = "Announcement"
    form_cls = AnnouncementForm
    record_cls = Announcement
    has_poster = True

    def defaults(self) -> Dict[str, Any]:
        return {
            "title": "",
            "details": "",
            "poster": "",
            "is_published": False,
        }

    async def fetch(self, uid: str) -> Dict[str, Any]:
        return await announcements.get_announcement_by_uid(self.client, self.token, uid)

    async def create(self, values: Dict[str, Any]) -> Any:
        return await announcements.create_announcement(self.client, self.token, values)

    async def update(self, uid: str, values: Dict[str, Any]) -> Any:
        return await announcements.update_announcement_by_uid(self.client, self.token, uid, values)
