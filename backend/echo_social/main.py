"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from echo_social.config import Settings, get_settings
from echo_social.context import ServerContext, build_context
from echo_social.routers import (
    auth,
    conversations,
    echo_links,
    follows,
    notifications,
    posts,
    realtime,
    users,
)
from echo_social.services.errors import ConflictError, InvalidOperationError, NotFoundError, SocialError

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def _status_for(exc: SocialError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (ConflictError, InvalidOperationError)):
        return 400
    return 500


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Validation error: " + "; ".join(parts)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_error(_: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    @app.exception_handler(SocialError)
    async def social_error(_: Request, exc: SocialError) -> JSONResponse:
        return JSONResponse(status_code=_status_for(exc), content={"message": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("api.unhandled_error method=%s path=%s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(settings: Settings | None = None, *, context: ServerContext | None = None) -> FastAPI:
    """Build an application around its own store, connection registry and hooks."""

    settings = settings or (context.settings if context is not None else get_settings())
    context = context or build_context(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        context.create_schema()
        yield
        context.dispose()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)

    app.include_router(auth.router, prefix=API_PREFIX, tags=["auth"])
    app.include_router(users.router, prefix=API_PREFIX, tags=["users"])
    app.include_router(posts.router, prefix=API_PREFIX, tags=["posts"])
    app.include_router(follows.router, prefix=API_PREFIX, tags=["follows"])
    app.include_router(conversations.router, prefix=API_PREFIX, tags=["conversations"])
    app.include_router(echo_links.router, prefix=API_PREFIX, tags=["echo-links"])
    app.include_router(notifications.router, prefix=API_PREFIX, tags=["notifications"])
    app.add_api_websocket_route(settings.realtime_path, realtime.realtime_endpoint)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Simple health check endpoint."""

        return {"status": "ok"}

    return app


app = create_app()
