from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from aibvs import db
from aibvs.config import PLACEHOLDER_SECRET, AppInfo, Settings, get_settings
from aibvs.core.logging import get_logger, setup_logging
from aibvs.routers import get_api_router
from aibvs.services.bootstrap import seed_defaults
from aibvs.utils.errors import AuthError, ConsoleError, error_response

logger = get_logger(__name__)
ALLOWED_CREATE_ENV = {"dev", "local", "test"}


def _configure_middlewares(fastapi_app: FastAPI, settings: Settings) -> None:
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    if settings.PROMETHEUS_ENABLED:
        from starlette_exporter import PrometheusMiddleware, handle_metrics

        fastapi_app.add_middleware(PrometheusMiddleware, app_name=AppInfo().name)
        fastapi_app.add_route("/metrics", handle_metrics)

    if settings.SENTRY_DSN:
        import sentry_sdk

        sentry_sdk.init(dsn=settings.SENTRY_DSN, traces_sample_rate=0.2)


def _assert_jwt_secret(settings: Settings) -> None:
    """Fail-fast when the token signing key is still the placeholder outside dev."""

    env_lower = settings.app_env.lower()
    if settings.JWT_SECRET_KEY != PLACEHOLDER_SECRET:
        return
    if env_lower in ALLOWED_CREATE_ENV:
        logger.warning("JWT_SECRET_KEY is the placeholder; allowed in dev only.", extra={"env": settings.app_env})
        return
    logger.error("JWT_SECRET_KEY must be configured before startup.", extra={"env": settings.app_env})
    raise RuntimeError("Missing JWT secret in non-dev environment.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.LOG_LEVEL)
    logger.info("Application startup", extra={"env": settings.app_env})
    _assert_jwt_secret(settings)

    env_lower = settings.app_env.lower()
    if settings.ALLOW_DB_CREATE_ALL and env_lower in ALLOWED_CREATE_ENV:
        logger.warning(
            "Running Base.metadata.create_all() because APP_ENV=%s and ALLOW_DB_CREATE_ALL=True",
            settings.app_env,
        )
        db.create_all(app.state.engine)
    else:
        logger.info(
            "Skipping create_all(); use Alembic migrations. APP_ENV=%s, ALLOW_DB_CREATE_ALL=%s",
            settings.app_env,
            settings.ALLOW_DB_CREATE_ALL,
        )

    if settings.SEED_DEFAULTS:
        with app.state.sessionmaker() as session:
            seed_defaults(session, settings)
    try:
        yield
    finally:
        app.state.engine.dispose()
        logger.info("Application shutdown", extra={"env": settings.app_env})


def _register_exception_handlers(fastapi_app: FastAPI) -> None:
    @fastapi_app.exception_handler(ConsoleError)
    async def console_error_handler(request: Request, exc: ConsoleError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        if exc.status_code >= 500:
            logger.error("Request failed", extra={"path": request.url.path, "code": exc.code})
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)

    @fastapi_app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = [
            {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
            for error in exc.errors()
        ]
        payload = error_response("VALIDATION_ERROR", "Invalid request.", {"fields": fields})
        return JSONResponse(status_code=400, content=payload)

    @fastapi_app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = exc.detail
        if isinstance(detail, dict) and "error" in detail:
            content: dict[str, Any] = detail
        else:
            content = error_response("HTTP_ERROR", str(detail))
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @fastapi_app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception", exc_info=exc)
        payload = error_response("INTERNAL_SERVER_ERROR", "An unexpected error occurred.")
        return JSONResponse(status_code=500, content=payload)


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """Build the application around ``settings`` and a database engine.

    Engine and session factory are attached to ``app.state`` right away, so
    request handlers work even when the lifespan is not run (test clients).
    """

    settings = settings or get_settings()
    app_info = AppInfo()
    fastapi_app = FastAPI(title=app_info.name, version=app_info.version, lifespan=lifespan)

    fastapi_app.state.settings = settings
    fastapi_app.state.engine = engine or db.build_engine(settings.database_url)
    fastapi_app.state.sessionmaker = db.build_sessionmaker(fastapi_app.state.engine)

    _configure_middlewares(fastapi_app, settings)
    fastapi_app.include_router(get_api_router())
    _register_exception_handlers(fastapi_app)
    return fastapi_app


app = create_app()

__all__ = ["app", "create_app"]
