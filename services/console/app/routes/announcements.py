from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from ..api.dependencies import get_context
from ..auth.context import ConsoleContext
from ..templating import templates
from .common import changes_from_form, read_poster, reject_poster, render_drawer, render_results

router = APIRouter()

REFRESH_EVENT = "announcements:refresh"


@router.get("/announcements", summary="Announcements Page")
async def announcements_page(request: Request, context: ConsoleContext = Depends(get_context)):
    page = context.pages["announcements"]
    await page.prefetch()
    query = context.query_client.get_query_state(page.query_key)
    return templates.TemplateResponse(
        request,
        "announcements.html",
        {
            "session": context.session,
            "page": page,
            "items": page.cached_results() if query.is_success else [],
            "error": query.error,
        },
    )


@router.get("/announcements/results", summary="Announcement Search Results")
async def announcements_results(
    request: Request,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    context: ConsoleContext = Depends(get_context),
):
    return await render_results(request, context.pages["announcements"], "partials/announcement_cards.html", search, limit)


@router.get(
    "/announcements/drawer",
    summary="Open the Announcement Drawer",
    description="Opens the drawer empty for a new announcement, or loads the announcement identified by uid when edit is set.",
)
async def open_announcement_drawer(
    request: Request,
    uid: str = "",
    edit: bool = False,
    context: ConsoleContext = Depends(get_context),
):
    drawer = context.drawers["announcements"]
    await drawer.start(uid, edit)
    return render_drawer(request, drawer)


@router.post(
    "/announcements/drawer/poster",
    summary="Pick an Announcement Poster",
    description="Keeps the picked image in the drawer and shows a preview. Nothing is uploaded until the drawer is saved.",
)
async def select_announcement_poster(
    request: Request,
    poster: UploadFile = File(...),
    context: ConsoleContext = Depends(get_context),
):
    drawer = context.drawers["announcements"]
    error = await read_poster(drawer, poster)
    if error:
        reject_poster(drawer, error)
    return render_drawer(request, drawer)


@router.post("/announcements/drawer/submit", summary="Save the Announcement Drawer")
async def submit_announcement_drawer(request: Request, context: ConsoleContext = Depends(get_context)):
    drawer = context.drawers["announcements"]
    form = await request.form()
    saved = await drawer.submit(changes_from_form(drawer, form))
    return render_drawer(request, drawer, REFRESH_EVENT if saved else None)


@router.post("/announcements/drawer/close", summary="Close the Announcement Drawer")
async def close_announcement_drawer(request: Request, context: ConsoleContext = Depends(get_context)):
    drawer = context.drawers["announcements"]
    drawer.close()
    return render_drawer(request, drawer)
