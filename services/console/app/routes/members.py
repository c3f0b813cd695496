from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, Response, status

from ..api.dependencies import get_context
from ..auth.context import ConsoleContext
from ..templating import templates
from .common import changes_from_form, render_drawer, render_results

router = APIRouter()

REFRESH_EVENT = "users:refresh"


@router.get(
    "/members",
    summary="Members Page",
    description="Member search page. Each render re-fetches the current search.",
)
async def members_page(request: Request, context: ConsoleContext = Depends(get_context)):
    page = context.pages["members"]
    await page.prefetch()
    query = context.query_client.get_query_state(page.query_key)
    return templates.TemplateResponse(
        request,
        "members.html",
        {
            "session": context.session,
            "page": page,
            "items": page.cached_results() if query.is_success else [],
            "error": query.error,
        },
    )


@router.get("/members/results", summary="Member Search Results")
async def members_results(
    request: Request,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    context: ConsoleContext = Depends(get_context),
):
    return await render_results(request, context.pages["members"], "partials/member_cards.html", search, limit)


@router.post(
    "/members/{uid}/status",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Purge or Restore a Member",
    description="Flips the member's active flag and asks the page to re-fetch the search results.",
)
async def toggle_member_status(
    uid: str,
    is_active: bool = Form(...),
    context: ConsoleContext = Depends(get_context),
):
    await context.pages["members"].toggle_status(uid, is_active)
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers={"HX-Trigger": REFRESH_EVENT})


@router.get("/members/drawer", summary="Open the Member Drawer")
async def open_member_drawer(
    request: Request,
    uid: str = "",
    edit: bool = False,
    context: ConsoleContext = Depends(get_context),
):
    drawer = context.drawers["members"]
    await drawer.start(uid, edit)
    return render_drawer(request, drawer)


@router.post("/members/drawer/submit", summary="Save the Member Drawer")
async def submit_member_drawer(request: Request, context: ConsoleContext = Depends(get_context)):
    drawer = context.drawers["members"]
    form = await request.form()
    saved = await drawer.submit(changes_from_form(drawer, form))
    return render_drawer(request, drawer, REFRESH_EVENT if saved else None)


@router.post("/members/drawer/close", summary="Close the Member Drawer")
async def close_member_drawer(request: Request, context: ConsoleContext = Depends(get_context)):
    drawer = context.drawers["members"]
    drawer.close()
    return render_drawer(request, drawer)
