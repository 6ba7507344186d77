"""
FastAPI application factory for the alerts API.

Routers:
    /health               component status of the session directory and store
    /alerts/notify        agent-raised alerts and the pending notification queue
    /alerts, /alerts/{id} synthesised and persisted alerts
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fleetwatch import __version__
from fleetwatch.api.dependencies import reset_dependencies
from fleetwatch.api.models import ErrorResponse
from fleetwatch.api.routes import alerts, health, notify
from fleetwatch.config.settings import Settings, get_settings
from fleetwatch.observability.logging import log_context

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        "Alerts API started",
        sessions_dir=str(settings.sessions_dir),
        alerts_file=str(settings.alerts_path),
        auth_enabled=bool(settings.api_key_set),
    )
    yield
    reset_dependencies()
    logger.info("Alerts API stopped")


def _install_middleware(app: FastAPI, settings: Settings) -> None:
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        # Reuse the caller's id so dashboard and server logs line up
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started = time.perf_counter()

        with log_context(request_id=request_id):
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        return response

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)
        body = ErrorResponse(detail="Internal server error", error_type=type(exc).__name__)
        return JSONResponse(status_code=500, content=body.model_dump())


def create_app() -> FastAPI:
    """Build the alerts API from current settings."""
    settings = get_settings()

    app = FastAPI(
        title="Fleetwatch Alerts API",
        description=(
            "Prioritised alerts for a fleet of autonomous agent sessions. "
            "Send `X-API-KEY` when `API_KEYS` is configured."
        ),
        version=__version__,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "health", "description": "Service health checks"},
            {"name": "notify", "description": "Agent-raised alerts and notification queue"},
            {"name": "alerts", "description": "Session alert analysis and management"},
        ],
    )
    _install_middleware(app, settings)

    # notify before alerts: /alerts/notify must not match /alerts/{alert_id}
    app.include_router(health.router, tags=["health"])
    app.include_router(notify.router, tags=["notify"])
    app.include_router(alerts.router, tags=["alerts"])

    return app
