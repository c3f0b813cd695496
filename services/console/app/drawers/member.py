from typing import Any, Dict

from ..forms.schemas import MemberForm
from ..microservices import users
from ..schemas import Member
from .base import EntityDrawer


class MemberDrawer(EntityDrawer):
    entity = "users"
    path = "members"
    label = "Member"
    form_cls = MemberForm
    record_cls = Member

    def defaults(self) -> Dict[str, Any]:
        return {
            "first_name": "",
            "last_name": "",
            "login": "",
            "email": "",
            "title": "",
        }

    async def fetch(self, uid: str) -> Dict[str, Any]:
        return await users.get_user_by_uid(self.client, self.token, uid)

    async def create(self, values: Dict[str, Any]) -> Any:
        return await users.create_user(self.client, self.token, values)

    async def update(self, uid: str, values: Dict[str, Any]) -> Any:
        return await users.update_user_by_uid(self.client, self.token, uid, values)
