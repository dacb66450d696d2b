# tazasu/main.py

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tazasu.api.v1.api import api_router
from tazasu.core.config import Settings, get_settings
from tazasu.core.errors import AppError, RateLimitExceeded
from tazasu.core.logging import setup_logging
from tazasu.core.rate_limit import RateLimiter
from tazasu.db.init_db import init_db
from tazasu.db.session import Database
from tazasu.services.upload_service import URL_PREFIX, UploadStorage

logger = logging.getLogger("tazasu")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "cross-origin",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    database = Database(settings.database_url)
    if settings.create_tables:
        init_db(database)
    app.state.db = database
    app.state.started_at = time.monotonic()
    logger.info(
        "%s %s started (%s), API at %s",
        settings.PROJECT_NAME, settings.VERSION, settings.environment, settings.api_prefix,
    )
    try:
        yield
    finally:
        database.dispose()
        logger.info("Database pool disposed, shutting down")


def register_exception_handlers(app: FastAPI) -> None:
    settings: Settings = app.state.settings

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "detail": "Invalid request data",
                "code": "VALIDATION_ERROR",
                "details": {"errors": jsonable_encoder(exc.errors())},
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and request.url.path.startswith(settings.api_prefix):
            content = {
                "success": False,
                "detail": "API endpoint not found",
                "path": request.url.path,
                "method": request.method,
            }
        else:
            content = {"success": False, "detail": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(
            status_code=400,
            content={"success": False, "detail": "Data already exists", "code": "CONFLICT"},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Server error on %s %s", request.method, request.url.path)
        content = {"success": False, "detail": "Internal server error", "code": "INTERNAL_ERROR"}
        if settings.is_development:
            content["details"] = str(exc)
        return JSONResponse(status_code=500, content=content)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_limiter = RateLimiter(
        limit=settings.rate_limit_max, window=settings.rate_limit_window_seconds
    )

    uploads = UploadStorage(settings.upload_dir)
    uploads.ensure_dirs()
    app.state.uploads = uploads

    # ---------- CORS ----------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- RATE LIMIT / REQUEST LOG ----------
    @app.middleware("http")
    async def rate_limit_and_log(request: Request, call_next):
        start = time.perf_counter()
        if request.url.path.startswith(settings.api_prefix + "/"):
            client = request.client.host if request.client else "unknown"
            verdict = app.state.rate_limiter.check(client)
            if not verdict["allowed"]:
                logger.warning("Rate limit exceeded for %s", client)
                exc = RateLimitExceeded(verdict["retry_after"])
                return JSONResponse(
                    status_code=exc.status_code,
                    content=exc.to_dict(),
                    headers={"Retry-After": str(exc.retry_after)},
                )

        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        logger.info(
            "%s %s -> %s (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response

    register_exception_handlers(app)

    # ---------- STATIC FILES ----------
    # Uploaded avatars and complaint photos: /uploads/avatars/*, /uploads/complaints/*
    app.mount(URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")

    # ---------- ROUTERS ----------
    @app.get(settings.api_prefix, include_in_schema=False)
    def api_root():
        return {
            "message": f"{settings.PROJECT_NAME} v{settings.VERSION}",
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                group: f"{settings.api_prefix}/{group}"
                for group in ("auth", "complaints", "admin", "updates", "upload")
            },
        }

    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_application()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run("tazasu.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
