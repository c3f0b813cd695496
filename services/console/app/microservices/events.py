from typing import Any, Dict, Union

from ..config.settings import settings
from ..schemas import SearchFilters
from ..utils.http_client import MicroserviceClient
from .base import search_body, write_body

SERVICE = "events-service"


async def search_events(
    client: MicroserviceClient,
    token: str,
    filters: Union[SearchFilters, Dict[str, Any], None] = None,
    limit: int = 100,
) -> Dict[str, Any]:
    return await client.request(
        SERVICE, "POST", f"{settings.EVENTS_SERVICE_URL}/events/search",
        token=token, json=search_body(filters, limit),
    )


async def get_event_by_uid(client: MicroserviceClient, token: str, uid: str) -> Dict[str, Any]:
    """Fetch one event; returns ``{"data": event}``."""
    return await client.request(
        SERVICE, "GET", f"{settings.EVENTS_SERVICE_URL}/events/{uid}", token=token,
    )


async def create_event(client: MicroserviceClient, token: str, values: Dict[str, Any]) -> Any:
    return await client.request(
        SERVICE, "POST", f"{settings.EVENTS_SERVICE_URL}/events",
        token=token, **write_body(values),
    )


async def update_event_by_uid(client: MicroserviceClient, token: str, uid: str, values: Dict[str, Any]) -> Any:
    return await client.request(
        SERVICE, "PUT", f"{settings.EVENTS_SERVICE_URL}/events/{uid}",
        token=token, **write_body(values),
    )
