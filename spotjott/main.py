"""
Main FastAPI application for the SpotJott API.
"""

import logging
import os
import sys
import threading
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from spotjott.config import (
    API_VERSION, CORS_ORIGINS, DEBUG, LOG_LEVEL, MEDIA_BASE_URL, MEDIA_ROOT, RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
)
from spotjott.errors import AppError, ConflictError, RateLimitError
from spotjott.ratelimit import RateLimiter
from spotjott.routes.auth import router as auth_router
from spotjott.routes.diaries import router as diaries_router
from spotjott.routes.diary_entries import router as diary_entries_router
from spotjott.routes.emotions import router as emotions_router
from spotjott.routes.health import router as health_router
from spotjott.routes.jots import router as jots_router
from spotjott.routes.notifications import router as notifications_router
from spotjott.routes.stories import router as stories_router
from spotjott.routes.users import router as users_router


logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")


def _fatal(exc_type, exc, tb) -> None:
    logger.critical("Uncaught exception, shutting down", exc_info=(exc_type, exc, tb))
    logging.shutdown()
    os._exit(1)


def install_fatal_handlers() -> None:
    """Log any uncaught exception (main thread or worker thread) and exit with status 1."""
    def excepthook(exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, tb)
            return
        _fatal(exc_type, exc, tb)

    def thread_excepthook(args):
        _fatal(args.exc_type, args.exc_value, args.exc_traceback)

    sys.excepthook = excepthook
    threading.excepthook = thread_excepthook


def error_response(status_code: int, message: str, details: Optional[str] = None, headers=None) -> JSONResponse:
    content = {"success": False, "error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def create_app(rate_limiter: Optional[RateLimiter] = None, fatal_handlers: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        rate_limiter: per-client request limiter; built from settings when omitted
        fatal_handlers: install the uncaught-exception exit policy when the server starts

    Returns:
        Configured FastAPI app instance
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if fatal_handlers:
            install_fatal_handlers()
        yield

    app = FastAPI(
        title="SpotJott API",
        description="Social journaling: jots, diaries, stories, emotions and follows",
        version=API_VERSION,
        debug=DEBUG,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.rate_limiter = rate_limiter or RateLimiter(
        max_requests=RATE_LIMIT_MAX_REQUESTS, window_seconds=RATE_LIMIT_WINDOW_SECONDS,
    )

    # Rate limiting runs inside CORS so 429s still carry CORS headers
    @app.middleware("http")
    async def rate_limit_middleware(request: Request, call_next):
        client = request.client.host if request.client else "unknown"
        try:
            request.app.state.rate_limiter.hit(client)
        except RateLimitError as exc:
            logger.warning("Rate limit exceeded for %s", client)
            return error_response(exc.status_code, exc.message, headers={"Retry-After": str(exc.retry_after)})
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
            message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
        else:
            message = "Invalid request"
        return error_response(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(404, f"Cannot {request.method} {request.url.path}")
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.info("Unhandled constraint violation on %s: %s", request.url.path, exc.orig)
        return error_response(409, ConflictError.default_message)

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
        """Handle SQLAlchemy database errors."""
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        return error_response(500, "Database operation failed", str(exc) if app.debug else None)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other unhandled exceptions."""
        logger.error("Unhandled exception: %s", traceback.format_exc())
        return error_response(500, "Internal server error", str(exc) if app.debug else None)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(jots_router)
    app.include_router(diaries_router)
    app.include_router(diary_entries_router)
    app.include_router(stories_router)
    app.include_router(emotions_router)
    app.include_router(notifications_router)
    app.include_router(health_router)

    app.mount(MEDIA_BASE_URL, StaticFiles(directory=MEDIA_ROOT, check_dir=False), name="media")

    @app.get("/")
    async def root():
        return {
            "success": True,
            "message": "SpotJott API Server",
            "version": API_VERSION,
            "status": "Running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    install_fatal_handlers()
    uvicorn.run("spotjott.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
