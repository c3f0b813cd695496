from typing import Any, Dict, Union

from ..config.settings import settings
from ..schemas import SearchFilters
from ..utils.http_client import MicroserviceClient
from .base import search_body, write_body

SERVICE = "announcements-service"


async def search_announcements(
    client: MicroserviceClient,
    token: str,
    filters: Union[SearchFilters, Dict[str, Any], None] = None,
    limit: int = 100,
) -> Dict[str, Any]:
    return await client.request(
        SERVICE, "POST", f"{settings.ANNOUNCEMENTS_SERVICE_URL}/announcements/search",
        token=token, json=search_body(filters, limit),
    )


async def get_announcement_by_uid(client: MicroserviceClient, token: str, uid: str) -> Dict[str, Any]:
    """Fetch one announcement; returns ``{"data": announcement}``."""
    return await client.request(
        SERVICE, "GET", f"{settings.ANNOUNCEMENTS_SERVICE_URL}/announcements/{uid}", token=token,
    )


async def create_announcement(client: MicroserviceClient, token: str, values: Dict[str, Any]) -> Any:
    return await client.request(
        SERVICE, "POST", f"{settings.ANNOUNCEMENTS_SERVICE_URL}/announcements",
        token=token, **write_body(values),
    )


async def update_announcement_by_uid(client: MicroserviceClient, token: str, uid: str, values: Dict[str, Any]) -> Any:
    return await client.request(
        SERVICE, "PUT", f"{settings.ANNOUNCEMENTS_SERVICE_URL}/announcements/{uid}",
        token=token, **write_body(values),
    )
