from typing import Any, Dict

from ..microservices import announcements
from ..schemas import Announcement
from .listing import ListPage


class AnnouncementsPage(ListPage):
    namespace = "announcements:search"
    record_cls = Announcement

    async def run_search(self, filters: Dict[str, Any], limit: int) -> Dict[str, Any]:
        return await announcements.search_announcements(self.client, self.token, filters, limit)
