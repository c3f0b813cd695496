import logging
import uuid

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse

from ..api.dependencies import get_registry, get_session, get_session_manager
from ..auth.context import ContextRegistry
from ..auth.session import SessionManager
from ..config.settings import Settings, get_settings
from ..templating import templates

logger = logging.getLogger(__name__)

router = APIRouter()


def _safe_next(next_url: str) -> str:
    # only same-site paths
    if next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return "/members"


@router.get("/login", summary="Sign-in Page")
async def login_page(request: Request, next: str = "/members"):
    return templates.TemplateResponse(request, "login.html", {"next": _safe_next(next)})


@router.post(
    "/login",
    summary="Start a Console Session",
    description="Accepts the access token issued by the auth provider and stores it in a signed session cookie.",
)
async def login(
    user_id: str = Form(...),
    access_token: str = Form(...),
    name: str = Form(""),
    next: str = Form("/members"),
    settings: Settings = Depends(get_settings),
    manager: SessionManager = Depends(get_session_manager),
    registry: ContextRegistry = Depends(get_registry),
):
    session, cookie = manager.issue(uuid.uuid4().hex, user_id, access_token, name=name)
    registry.start(session)
    response = RedirectResponse(_safe_next(next), status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        cookie,
        max_age=settings.SESSION_TTL_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    logger.info(f"User {user_id} signed in")
    return response


@router.api_route("/logout", methods=["GET", "POST"], summary="End the Console Session")
async def logout(
    settings: Settings = Depends(get_settings),
    session=Depends(get_session),
    registry: ContextRegistry = Depends(get_registry),
):
    if session is not None:
        registry.sign_out(session)
        logger.info(f"User {session.user_id} signed out")
    response = RedirectResponse(settings.LOGIN_URL, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response
