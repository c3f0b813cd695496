from typing import Any, Dict, List, Union

from ..config.settings import settings
from ..schemas import SearchFilters, StatusUpdate
from ..utils.http_client import MicroserviceClient
from .base import search_body

SERVICE = "users-service"


async def search_users(
    client: MicroserviceClient,
    token: str,
    filters: Union[SearchFilters, Dict[str, Any], None] = None,
    limit: int = 100,
) -> Dict[str, Any]:
    """Search members; returns ``{"data": [member, ...]}``."""
    return await client.request(
        SERVICE, "POST", f"{settings.USERS_SERVICE_URL}/users/search",
        token=token, json=search_body(filters, limit),
    )


async def update_users_status(
    client: MicroserviceClient,
    token: str,
    status: bool,
    body: Union[StatusUpdate, Dict[str, List[str]]],
) -> Any:
    """Set the active flag of every member listed in ``body["uids"]``."""
    if isinstance(body, dict):
        body = StatusUpdate.model_validate(body)
    flag = "true" if status else "false"
    return await client.request(
        SERVICE, "PATCH", f"{settings.USERS_SERVICE_URL}/users/status/{flag}",
        token=token, json=body.model_dump(),
    )


async def get_user_by_uid(client: MicroserviceClient, token: str, uid: str) -> Dict[str, Any]:
    return await client.request(
        SERVICE, "GET", f"{settings.USERS_SERVICE_URL}/users/{uid}", token=token,
    )


async def create_user(client: MicroserviceClient, token: str, values: Dict[str, Any]) -> Any:
    return await client.request(
        SERVICE, "POST", f"{settings.USERS_SERVICE_URL}/users", token=token, json=values,
    )


async def update_user_by_uid(client: MicroserviceClient, token: str, uid: str, values: Dict[str, Any]) -> Any:
    return await client.request(
        SERVICE, "PUT", f"{settings.USERS_SERVICE_URL}/users/{uid}", token=token, json=values,
    )
