"""
Gateway Application
===================

FastAPI application factory for the gateway.

The application is built around explicitly passed collaborators (no
module-level state), so tests and the lifecycle wrapper can create as
many independent instances as they need.

Error envelope:
    Every GatewayError and Starlette's own 404/405 become
    {"error": "..."} with the matching status code. Anything else
    becomes a 500 with a generic message and is logged with traceback.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mirror_gateway import __version__
from mirror_gateway.api.routes import router
from mirror_gateway.config import Settings
from mirror_gateway.control import ActionTranslator
from mirror_gateway.errors import GatewayError, MethodNotAllowed, RouteNotFound
from mirror_gateway.frames import FrameStore, ImageEncoder
from mirror_gateway.models import ErrorResponse
from mirror_gateway.ocr import TextExtractor


logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        ErrorResponse(error=message).model_dump(),
        status_code=status_code,
        headers=headers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log serve-loop startup and shutdown."""
    settings: Settings = app.state.settings
    logger.info(
        f"Gateway API ready under {settings.api.prefix or '/'} "
        f"(ocr={'on' if app.state.text_extractor else 'off'})"
    )
    yield
    logger.info("Gateway API shutting down")


def create_app(
    translator: ActionTranslator,
    frame_store: FrameStore,
    encoder: ImageEncoder,
    text_extractor: Optional[TextExtractor] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        translator: Dispatches control requests to the injector
        frame_store: Source of /frame and /frame/ocr snapshots
        encoder: Image encoder for /frame
        text_extractor: OCR backend; None disables /frame/ocr (500)
        settings: Gateway settings (defaults when None)

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings()

    app = FastAPI(
        title="mirror-gateway",
        description="Remote control and screen snapshot gateway",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )

    app.state.settings = settings
    app.state.translator = translator
    app.state.frame_store = frame_store
    app.state.encoder = encoder
    app.state.text_extractor = text_extractor

    app.include_router(router, prefix=settings.api.prefix)

    @app.exception_handler(GatewayError)
    async def gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            message = RouteNotFound.default_message
        elif exc.status_code == 405:
            message = MethodNotAllowed.default_message
        else:
            message = str(exc.detail)
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}")
        return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error in {request.method} {request.url.path}")
        # Served outside the middleware stack, so the close policy is applied here.
        headers = None if settings.api.keep_alive else {"Connection": "close"}
        return error_response(500, "Internal server error", headers=headers)

    if not settings.api.keep_alive:
        @app.middleware("http")
        async def close_connection(request: Request, call_next):
            response = await call_next(request)
            response.headers["Connection"] = "close"
            return response

    return app
