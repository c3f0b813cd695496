import httpx
import logging
from typing import Any, Dict, Optional

from ..config.settings import settings

logger = logging.getLogger(__name__)


class MicroserviceError(Exception):
    """A backend microservice could not be reached or answered with an error."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        self.service = service
        self.message = message
        self.status_code = status_code
        super().__init__(f"{service}: {message}" + (f" (HTTP {status_code})" if status_code else ""))


class MicroserviceClient:
    """
    Shared HTTP client for the users, announcements and events microservices.

    One instance lives for the whole application: it is opened on startup and
    closed on shutdown. Tests may pass their own ``httpx.AsyncClient`` (for
    example one built on ``httpx.MockTransport``).
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = None):
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        service: str,
        method: str,
        url: str,
        token: Optional[str] = None,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = await self.client.request(
                method,
                url,
                headers=headers,
                json=json,
                params=params,
                data=data,
                files=files,
            )
        except httpx.HTTPError as e:
            logger.exception(f"Error calling {service} at {method} {url}: {e}")
            raise MicroserviceError(service, str(e) or e.__class__.__name__) from e

        if resp.is_error:
            logger.error(f"{service} answered {resp.status_code} for {method} {url}: {resp.text[:200]}")
            raise MicroserviceError(service, _error_message(resp), status_code=resp.status_code)

        logger.debug(f"{service} {method} {url} -> {resp.status_code}")
        if not resp.content:
            return None
        if "application/json" in resp.headers.get("content-type", ""):
            return resp.json()
        return resp.text


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("message") or body)
    return str(body)
