from typing import Optional

from fastapi import Depends, Request

from ..auth.context import ConsoleContext, ContextRegistry
from ..auth.session import Session, SessionManager
from ..config.settings import Settings, get_settings
from ..utils.http_client import MicroserviceClient


class LoginRequired(Exception):
    """No valid session; the request is answered with a redirect to the login page."""

    def __init__(self, next_url: str = ""):
        self.next_url = next_url
        super().__init__("login required")


def get_http_client(request: Request) -> MicroserviceClient:
    return request.app.state.http_client


def get_registry(request: Request) -> ContextRegistry:
    return request.app.state.contexts


def get_session_manager(settings: Settings = Depends(get_settings)) -> SessionManager:
    return SessionManager(settings)


def get_session(
    request: Request,
    settings: Settings = Depends(get_settings),
    manager: SessionManager = Depends(get_session_manager),
) -> Optional[Session]:
    return manager.read(request.cookies.get(settings.SESSION_COOKIE_NAME))


def get_context(
    request: Request,
    session: Optional[Session] = Depends(get_session),
    registry: ContextRegistry = Depends(get_registry),
) -> ConsoleContext:
    context = registry.get(session) if session is not None else None
    if context is None:
        raise LoginRequired(next_url=request.url.path)
    return context
