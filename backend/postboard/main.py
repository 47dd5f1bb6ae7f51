"""FastAPI application factory.

`create_app()` reads `Settings` (failing fast on missing mandatory
values), builds the database engine and the credential/token services,
stores them on `app.state` and mounts the routers:

- GET /health
- POST /api/auth/register
- POST /api/auth/login
- GET /api/posts, GET /api/posts/{id}
- POST /api/posts, PUT /api/posts/{id}, DELETE /api/posts/{id}

Run with `postboard` (the `run` entry point), which serves on `PORT`.
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .database import build_engine, create_db_and_tables
from .errors import ApiError, error_envelope
from .routes import auth_router, health_router, posts_router
from .security import CredentialService, TokenService
from .validation import format_errors

logger = logging.getLogger("postboard.api")

_LEVELS = {"error": logging.ERROR, "warn": logging.WARNING, "info": logging.INFO, "debug": logging.DEBUG}


def configure_logging(settings: Settings):
    level = _LEVELS[settings.LOG_LEVEL]
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger("postboard").setLevel(level)


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings)
    engine = engine or build_engine(settings.DATABASE_URL)
    create_db_and_tables(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("startup environment=%s port=%s", settings.NODE_ENV, settings.PORT)
        yield
        logger.info("shutdown; disposing database engine")
        engine.dispose()

    app = FastAPI(title="Postboard API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.credential_service = CredentialService(rounds=settings.BCRYPT_ROUNDS)
    app.state.token_service = TokenService(settings.JWT_SECRET, expires_in=settings.JWT_EXPIRES_IN)
    app.state.started_at = time.monotonic()
    app.state.max_body_bytes = settings.MAX_BODY_BYTES

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
        started = time.perf_counter()
        response: Response
        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
            logger.exception(
                "request_failed %s",
                json.dumps(
                    {
                        "request_id": req_id,
                        "path": request.url.path,
                        "method": request.method,
                        "duration_ms": elapsed_ms,
                    },
                    ensure_ascii=True,
                ),
            )
            response = JSONResponse(
                status_code=500,
                content=error_envelope("Internal server error", exc=None if settings.is_production else exc),
            )
        response.headers["X-Request-ID"] = req_id
        if settings.ENABLE_LOGGING:
            elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
            logger.info(
                "request_done %s",
                json.dumps(
                    {
                        "request_id": req_id,
                        "path": request.url.path,
                        "method": request.method,
                        "status_code": response.status_code,
                        "duration_ms": elapsed_ms,
                        "client": request.client.host if request.client else "unknown",
                    },
                    ensure_ascii=True,
                ),
            )
        return response

    # added last so it wraps the request-id middleware and its 500 responses
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CORS_ORIGIN],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app, settings)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(posts_router)
    return app


def register_error_handlers(app: FastAPI, settings: Settings):
    """Render every failure in the `{success: false, error: {...}}` envelope."""

    def _stack(exc: BaseException) -> Optional[BaseException]:
        return None if settings.is_production else exc

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            content = error_envelope(exc.message, exc=_stack(exc))
        else:
            content = error_envelope(exc.message, details=exc.details)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("validation error on %s", request.url.path)
        return JSONResponse(
            status_code=400,
            content=error_envelope("Validation failed", details=format_errors(exc.errors())),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=error_envelope(message), headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("unhandled exception on %s", request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=error_envelope("Internal server error", exc=_stack(exc)))


def run():
    """Serve the API with uvicorn on the configured `PORT`."""
    settings = Settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.replace("warn", "warning"))


if __name__ == "__main__":
    run()
