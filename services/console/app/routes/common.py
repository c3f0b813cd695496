from typing import Any, Dict, Optional

from fastapi import Request, Response, UploadFile
from starlette.datastructures import FormData

from ..config.settings import settings
from ..drawers.base import EntityDrawer
from ..forms.poster import NewFile
from ..pages.listing import ListPage
from ..templating import templates

TRUTHY = {"on", "true", "1", "yes"}


def changes_from_form(drawer: EntityDrawer, form: FormData) -> Dict[str, Any]:
    """
    Field transitions for a submitted drawer form.

    Unchecked checkboxes are absent from the form, so booleans default to
    False. The poster is left alone; it changes only through file selection.
    """
    changes: Dict[str, Any] = {}
    for name, default in drawer.defaults().items():
        if name == "poster":
            continue
        if isinstance(default, bool):
            changes[name] = str(form.get(name, "")).lower() in TRUTHY
        elif name in form:
            changes[name] = form.get(name)
    return changes


def render_drawer(request: Request, drawer: EntityDrawer, refresh_event: Optional[str] = None) -> Response:
    headers = {"HX-Trigger": refresh_event} if refresh_event else None
    return templates.TemplateResponse(
        request,
        "drawer.html",
        {"drawer": drawer, "state": drawer.state},
        headers=headers,
    )


async def render_results(request: Request, page: ListPage, template: str, search: Optional[str], limit: Optional[int]) -> Response:
    if limit:
        page.set_limit(limit)
    if search is not None and not await page.on_search(search):
        # a newer keystroke is on its way; let it render the results
        return Response(status_code=204)
    items = await page.results()
    return templates.TemplateResponse(request, template, {"items": items, "page": page})


async def read_poster(drawer: EntityDrawer, poster: UploadFile) -> Optional[str]:
    """Hand a picked file to the drawer; returns an error message when it is refused."""
    content_type = poster.content_type or ""
    if not content_type.startswith("image/"):
        return "Poster must be an image"
    content = await poster.read()
    if len(content) > settings.MAX_POSTER_SIZE:
        return f"Poster must be smaller than {settings.MAX_POSTER_SIZE // 1048576}MB"
    drawer.select_poster(NewFile(filename=poster.filename or "poster", content_type=content_type, content=content))
    return None


def reject_poster(drawer: EntityDrawer, message: str) -> None:
    drawer.state = drawer.state.touch("poster").with_errors({**drawer.state.errors, "poster": message})
