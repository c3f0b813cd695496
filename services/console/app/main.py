from contextlib import asynccontextmanager
from urllib.parse import urlencode

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from .api.dependencies import LoginRequired
from .auth.context import ContextRegistry
from .config.logging import configure_logging
from .config.settings import settings
from .drawers.base import DrawerStateError
from .routes import announcements, auth, events, members
from .templating import templates
from .utils.http_client import MicroserviceClient, MicroserviceError

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Session contexts and the shared HTTP client live exactly as long as the app
    app.state.http_client = MicroserviceClient(timeout=settings.REQUEST_TIMEOUT)
    app.state.contexts = ContextRegistry(app.state.http_client, settings)
    yield
    app.state.contexts.clear()
    await app.state.http_client.aclose()


app = FastAPI(
    title="Membership Admin Console",
    description="Admin screens for members, announcements and events",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, tags=["Session"])
app.include_router(members.router, tags=["Members"])
app.include_router(announcements.router, tags=["Announcements"])
app.include_router(events.router, tags=["Events"])


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    target = settings.LOGIN_URL
    if exc.next_url:
        target = f"{target}?{urlencode({'next': exc.next_url})}"
    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    if request.headers.get("HX-Request"):
        # htmx swaps fragments; make it navigate the whole page instead
        response.headers["HX-Redirect"] = target
    return response


@app.exception_handler(MicroserviceError)
async def microservice_error_handler(request: Request, exc: MicroserviceError):
    return templates.TemplateResponse(
        request,
        "partials/error.html",
        {"message": f"The {exc.service} could not complete the request: {exc.message}"},
        status_code=status.HTTP_502_BAD_GATEWAY,
    )


@app.exception_handler(DrawerStateError)
async def drawer_state_handler(request: Request, exc: DrawerStateError):
    return templates.TemplateResponse(
        request,
        "partials/error.html",
        {"message": f"{exc}. Close the drawer and open it again."},
        status_code=status.HTTP_409_CONFLICT,
    )


@app.get("/health", tags=["Health Check"])
def health_check():
    """
    Health check endpoint to verify that the console is running.
    """
    return {"status": "ok"}


@app.get("/", include_in_schema=False)
def read_root():
    return RedirectResponse("/members", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
