import logging
from typing import Any, Dict

from ..microservices import users
from ..schemas import Member
from .listing import ListPage

logger = logging.getLogger(__name__)


class MembersPage(ListPage):
    namespace = "users:search"
    record_cls = Member

    async def run_search(self, filters: Dict[str, Any], limit: int) -> Dict[str, Any]:
        return await users.search_users(self.client, self.token, filters, limit)

    async def toggle_status(self, uid: str, is_active: bool) -> bool:
        """
        Flip a member between active and purged.

        On success the search results are marked stale so the next read
        fetches them again. Returns the new status.
        """
        status = not is_active
        await self.query_client.mutate(
            users.update_users_status,
            self.client,
            self.token,
            status,
            {"uids": [uid]},
            on_success=lambda _: self.query_client.invalidate_queries(self.namespace),
        )
        logger.info(f"Member {uid} {'restored' if status else 'purged'}")
        return status
