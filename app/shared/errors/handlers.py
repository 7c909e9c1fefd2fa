"""
Centralized error handlers for FastAPI.

Maps forecasting domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.forecasting.errors import (
    ForecastingDomainError,
    InsufficientDataError,
    InvalidRequestError,
    PersistenceError,
    TrainingError,
    UpstreamFetchError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_422 = 422
HTTP_500 = 500
HTTP_502 = 502


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(InvalidRequestError)
    async def handle_invalid_request(
        _request: Request, exc: InvalidRequestError
    ) -> JSONResponse:
        """Handle malformed or non-future forecast requests."""
        logger.warning("Invalid request: %s", exc.reason)
        return _error_response(HTTP_422, "Invalid request", exc.reason)

    @app.exception_handler(InsufficientDataError)
    async def handle_insufficient_data(
        _request: Request, exc: InsufficientDataError
    ) -> JSONResponse:
        """Handle requests without enough history to train on."""
        logger.warning("Insufficient data: %s", exc.message)
        return _error_response(HTTP_422, "Insufficient data", exc.message)

    @app.exception_handler(TrainingError)
    async def handle_training(
        _request: Request, exc: TrainingError
    ) -> JSONResponse:
        """Handle malformed training inputs."""
        logger.error("Training error: %s", exc.reason, exc_info=exc)
        return _error_response(HTTP_400, "Training failed")

    @app.exception_handler(UpstreamFetchError)
    async def handle_upstream_fetch(
        _request: Request, exc: UpstreamFetchError
    ) -> JSONResponse:
        """Handle market-data or macro-data provider failures."""
        logger.error("Upstream fetch error from %s: %s", exc.provider, exc.reason)
        return _error_response(HTTP_502, "Upstream data provider failed")

    @app.exception_handler(PersistenceError)
    async def handle_persistence(
        _request: Request, exc: PersistenceError
    ) -> JSONResponse:
        """Handle prediction store failures."""
        logger.error("Persistence error during %s: %s", exc.operation, exc.reason)
        return _error_response(HTTP_500, "Prediction could not be stored")

    @app.exception_handler(ForecastingDomainError)
    async def handle_forecasting_domain(
        _request: Request, exc: ForecastingDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled forecasting domain errors."""
        logger.error("Unhandled forecasting domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
