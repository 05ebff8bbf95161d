"""FastAPI application factory."""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from luna_chat.api.routes import admin, chat, system
from luna_chat.app import LunaApp
from luna_chat.config import AppConfig
from luna_chat.errors import LunaError, MissingInputError
from luna_chat.log import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)


def create_app(config: AppConfig, luna: LunaApp | None = None) -> FastAPI:
    """Build the HTTP app; *luna* may be injected (tests), otherwise built from *config*."""
    luna = luna or LunaApp(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await luna.start()
        app.state.luna = luna
        try:
            yield
        finally:
            await luna.stop()

    app = FastAPI(title="Luna Chat", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        bind_request_context(request_id=request_id, path=request.url.path)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(LunaError)
    async def luna_error_handler(request: Request, exc: LunaError):
        logger.warning(
            "request_failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            status=exc.status_code,
            details=exc.details,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        logger.warning("request_invalid", path=request.url.path, details=details)
        error = MissingInputError("Requisição inválida", details=details)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
        return JSONResponse(status_code=500, content=LunaError().to_dict())

    app.include_router(chat.router)
    app.include_router(system.router)
    app.include_router(admin.router)

    return app
