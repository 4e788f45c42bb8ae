"""
FastAPI application for SpendWise.

create_app() builds a fresh application. The lifespan handler
assembles the components once at startup, keeps them on app.state,
and releases them at shutdown.
"""

from contextlib import asynccontextmanager
from typing import Optional
from uuid import UUID, uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from spendwise import __version__
from spendwise.api.errors import register_exception_handlers
from spendwise.api.routes import spending_router, user_router
from spendwise.audit import configure_logging
from spendwise.config import Settings, get_settings, validate_all_settings
from spendwise.models.schemas import MessageResponse
from spendwise.orchestrator import create_app_components


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _correlation_id_from(value: Optional[str]) -> UUID:
    if value:
        try:
            return UUID(value)
        except ValueError:
            pass
    return uuid4()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    configure_logging(settings.app.log_level)

    checks = validate_all_settings(settings)
    failed = [name for name, ok in checks.items() if ok is False]
    if failed:
        logger.error("settings_invalid", groups=failed, details=checks)

    components = create_app_components(settings)
    app.state.components = components
    logger.info("application_started", environment=settings.app.app_environment)

    try:
        yield
    finally:
        components.close()
        logger.info("application_stopped")


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the HTTP application.

    Args:
        settings: Configuration to use. Defaults to get_settings().
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="SpendWise API",
        description="Personal budget and spending tracking: accounts, budget, and spending records.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def assign_correlation_id(request: Request, call_next):
        correlation_id = _correlation_id_from(request.headers.get(REQUEST_ID_HEADER))
        request.state.correlation_id = correlation_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = str(correlation_id)
        return response

    register_exception_handlers(app)

    # PUBLIC_INTERFACE
    @app.get("/", response_model=MessageResponse, tags=["health"], summary="Health check")
    async def health() -> MessageResponse:
        return MessageResponse(message="SpendWise API is running.")

    app.include_router(user_router)
    app.include_router(spending_router)

    return app
