# FastAPI application factory.
# Created: 2026-10-12
#
# One Services graph per app: the store and HTTP client are created here,
# checked on startup and closed on shutdown. Every response is stamped with a
# permissive CORS origin, and bare OPTIONS requests are answered directly.

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from luxbridge import __version__
from luxbridge.api.v1 import mount_v1_routers
from luxbridge.api.v1.discovery import router as discovery_router
from luxbridge.api.v1.schemas.common import ErrorResponse
from luxbridge.config import Settings, get_settings
from luxbridge.errors import LuxBridgeError
from luxbridge.platform_api.router import router as platform_api_router
from luxbridge.services import Services, build_services

logger = logging.getLogger(__name__)

ALLOWED_METHODS = "GET, POST, DELETE, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization"


def _error(status_code: int, error: str, message: str | None = None, **extra) -> JSONResponse:
    content = ErrorResponse(error=error, message=message).model_dump() | extra
    return JSONResponse(status_code=status_code, content=content)


def setup_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LuxBridgeError)
    async def luxbridge_error_handler(request: Request, exc: LuxBridgeError):
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
        return _error(exc.status_code, exc.code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        error = "not_found" if exc.status_code == 404 else "http_error"
        return _error(exc.status_code, error, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return _error(400, "validation_error", "Invalid input data", details=details)


async def boundary_middleware(request: Request, call_next):
    """Answer preflights, stamp the CORS origin and hide unexpected errors."""
    if request.method == "OPTIONS":
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": ALLOWED_METHODS,
                "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            },
        )

    try:
        response = await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = _error(500, "internal_error", "An unexpected error occurred")

    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Build the LuxBridge auth application."""
    settings = settings or get_settings()
    services = services or build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await services.store.ping()
        logger.info("LuxBridge auth server %s ready", __version__)
        try:
            yield
        finally:
            await services.aclose()

    app = FastAPI(
        title="LuxBridge Auth",
        description="OAuth 2.1 authorization server and platform identity broker.",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
        lifespan=lifespan,
    )
    app.state.services = services

    setup_error_handlers(app)
    app.middleware("http")(boundary_middleware)

    app.include_router(discovery_router)
    mount_v1_routers(app)
    app.include_router(platform_api_router)
    return app
