"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (one per bounded context)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- The scheduled accuracy validator (optional)

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.infrastructure.forecasting.prediction_repository import ensure_schema
from app.interfaces.forecasting.dependencies import (
    get_db_engine,
    get_validate_predictions_use_case,
)
from app.interfaces.forecasting.router import router as forecasting_router
from app.interfaces.health import router as health_router
from app.interfaces.jobs.scheduler import ValidationScheduler
from app.shared.errors.handlers import register_error_handlers
from app.shared.logging import configure_logging
from app.shared.security.headers import SecurityHeadersMiddleware
from app.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: prepare the store, start/stop the validator job."""
    try:
        ensure_schema(get_db_engine())
    except SQLAlchemyError:
        logger.warning(
            "Prediction store unavailable at startup; requests will fail until it is reachable.",
            exc_info=True,
        )

    scheduler = None
    if settings.validator_schedule_enabled:
        scheduler = ValidationScheduler(
            get_validate_predictions_use_case, settings.validator_cron
        )
        scheduler.start()
    app.state.validation_scheduler = scheduler

    yield

    if scheduler is not None:
        scheduler.stop()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(forecasting_router, prefix="/api/v1")

    return app


app = create_app()
