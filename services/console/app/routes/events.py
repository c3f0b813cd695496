from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from ..api.dependencies import get_context
from ..auth.context import ConsoleContext
from ..templating import templates
from .common import changes_from_form, read_poster, reject_poster, render_drawer, render_results

router = APIRouter()

REFRESH_EVENT = "events:refresh"


@router.get("/events", summary="Events Page")
async def events_page(request: Request, context: ConsoleContext = Depends(get_context)):
    page = context.pages["events"]
    await page.prefetch()
    query = context.query_client.get_query_state(page.query_key)
    return templates.TemplateResponse(
        request,
        "events.html",
        {
            "session": context.session,
            "page": page,
            "items": page.cached_results() if query.is_success else [],
            "error": query.error,
        },
    )


@router.get("/events/results", summary="Event Search Results")
async def events_results(
    request: Request,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    context: ConsoleContext = Depends(get_context),
):
    return await render_results(request, context.pages["events"], "partials/event_cards.html", search, limit)


@router.get(
    "/events/drawer",
    summary="Open the Event Drawer",
    description="Opens the drawer empty for a new event, or loads the event identified by uid when edit is set.",
)
async def open_event_drawer(
    request: Request,
    uid: str = "",
    edit: bool = False,
    context: ConsoleContext = Depends(get_context),
):
    drawer = context.drawers["events"]
    await drawer.start(uid, edit)
    return render_drawer(request, drawer)


@router.post(
    "/events/drawer/poster",
    summary="Pick an Event Poster",
    description="Keeps the picked image in the drawer and shows a preview. Nothing is uploaded until the drawer is saved.",
)
async def select_event_poster(
    request: Request,
    poster: UploadFile = File(...),
    context: ConsoleContext = Depends(get_context),
):
    drawer = context.drawers["events"]
    error = await read_poster(drawer, poster)
    if error:
        reject_poster(drawer, error)
    return render_drawer(request, drawer)


@router.post("/events/drawer/submit", summary="Save the Event Drawer")
async def submit_event_drawer(request: Request, context: ConsoleContext = Depends(get_context)):
    drawer = context.drawers["events"]
    form = await request.form()
    saved = await drawer.submit(changes_from_form(drawer, form))
    return render_drawer(request, drawer, REFRESH_EVENT if saved else None)


@router.post("/events/drawer/close", summary="Close the Event Drawer")
async def close_event_drawer(request: Request, context: ConsoleContext = Depends(get_context)):
    drawer = context.drawers["events"]
    drawer.close()
    return render_drawer(request, drawer)
