import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from ..config.settings import Settings, settings as default_settings
from ..drawers.announcement import AnnouncementDrawer
from ..drawers.base import EntityDrawer
from ..drawers.event import EventDrawer
from ..drawers.member import MemberDrawer
from ..pages.announcements import AnnouncementsPage
from ..pages.events import EventsPage
from ..pages.listing import ListPage
from ..pages.members import MembersPage
from ..query.client import QueryClient
from ..utils.http_client import MicroserviceClient
from .session import Session

logger = logging.getLogger(__name__)


class ConsoleContext:
    """Everything one signed-in session works with: its query cache, pages and drawers."""

    def __init__(self, session: Session, client: MicroserviceClient, settings: Settings = None):
        settings = settings or default_settings
        self.session = session
        self.query_client = QueryClient(stale_time=settings.QUERY_STALE_TIME, cache_time=settings.QUERY_CACHE_TIME)
        token = session.access_token

        page_args = dict(
            debounce_seconds=settings.SEARCH_DEBOUNCE_SECONDS,
            limit=settings.SEARCH_LIMIT,
        )
        self.pages: Dict[str, ListPage] = {
            "members": MembersPage(client, self.query_client, token, **page_args),
            "announcements": AnnouncementsPage(client, self.query_client, token, **page_args),
            "events": EventsPage(client, self.query_client, token, **page_args),
        }
        self.drawers: Dict[str, EntityDrawer] = {
            "members": MemberDrawer(client, self.query_client, token),
            "announcements": AnnouncementDrawer(client, self.query_client, token),
            "events": EventDrawer(client, self.query_client, token),
        }

    def close(self) -> None:
        for drawer in self.drawers.values():
            drawer.close()
        self.query_client.clear()


class ContextRegistry:
    """
    Creates a context at sign-in and tears it down at sign-out.

    Signed-out session ids are remembered until their cookie would have
    expired, so a copy of the cookie can't bring the session back. Contexts
    whose session expired are dropped whenever one is created or looked up.
    """

    def __init__(self, client: MicroserviceClient, settings: Settings = None):
        self.client = client
        self.settings = settings or default_settings
        self._contexts: Dict[str, ConsoleContext] = {}
        self._revoked: Dict[str, datetime] = {}

    def start(self, session: Session) -> ConsoleContext:
        self.reap()
        self.end(session.session_id)
        context = ConsoleContext(session, self.client, self.settings)
        self._contexts[session.session_id] = context
        logger.info(f"Started console context for user {session.user_id}")
        return context

    def get(self, session: Session) -> Optional[ConsoleContext]:
        """
        Context for a valid session cookie, or ``None`` once the session
        signed out. A cookie that outlived the process (restart, another
        worker) gets a fresh context.
        """
        self.reap()
        if session.session_id in self._revoked:
            return None
        context = self._contexts.get(session.session_id)
        if context is None:
            context = self.start(session)
        return context

    def end(self, session_id: Optional[str]) -> None:
        context = self._contexts.pop(session_id, None) if session_id else None
        if context is not None:
            context.close()
            logger.info(f"Tore down console context for user {context.session.user_id}")

    def sign_out(self, session: Session) -> None:
        self.end(session.session_id)
        self._revoked[session.session_id] = session.expires_at

    def reap(self) -> int:
        """Tear down contexts of expired sessions and forget expired revocations."""
        now = datetime.now(timezone.utc)
        expired = [sid for sid, context in self._contexts.items() if context.session.expires_at <= now]
        for session_id in expired:
            self.end(session_id)
        for session_id in [sid for sid, expires_at in self._revoked.items() if expires_at <= now]:
            del self._revoked[session_id]
        return len(expired)

    def clear(self) -> None:
        for session_id in list(self._contexts):
            self.end(session_id)
        self._revoked.clear()

    def __len__(self) -> int:
        return len(self._contexts)
