"""
Pydantic schemas for forecasting API request/response validation.

These schemas enforce input validation and define the API contract.
Ticker normalization and the future-date rule live in the use case,
so the request schema only checks shape.
No business logic belongs here.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

TICKER_DESCRIPTION = "Ticker symbol, e.g. AAPL or SHOP (suffix .TO is added for TSX)"
TICKER_PATTERN = r"^[A-Za-z0-9.\-]+$"
TICKER_MIN_LEN = 1
TICKER_MAX_LEN = 12


class ForecastRequest(BaseModel):
    """Request schema for the forecast endpoint.

    Attributes:
        ticker: Ticker as entered by the caller.
        market: "US" or "TSX". Defaults to US.
        target_date: Day to forecast. Must be after today (UTC).
    """

    ticker: str = Field(
        ...,
        min_length=TICKER_MIN_LEN,
        max_length=TICKER_MAX_LEN,
        pattern=TICKER_PATTERN,
        description=TICKER_DESCRIPTION,
    )
    market: str = Field(default="US", description="Listing market: US or TSX")
    target_date: date = Field(..., description="Forecast date (YYYY-MM-DD)")


class ForecastResponse(BaseModel):
    """Response schema for the forecast endpoint."""

    prediction_id: UUID
    ticker: str
    market: str
    target_date: date
    days_ahead: int
    current_price: float
    predicted_price: float
    lower_bound: float
    upper_bound: float
    currency: str
    r_squared: float
    mae: float
    training_samples: int
    volatility: float


class PredictionRecordItem(BaseModel):
    """A single stored prediction."""

    id: UUID
    ticker: str
    market: str
    target_date: date
    predicted_price: float
    lower_bound: float
    upper_bound: float
    current_price: float
    days_ahead: int
    r_squared: float
    training_samples: int
    actual_price: float | None = None
    is_accurate: bool | None = None
    created_at: datetime | None = None


class PredictionHistoryResponse(BaseModel):
    """Response schema for the prediction history endpoint."""

    predictions: list[PredictionRecordItem]


class AccuracySummaryResponse(BaseModel):
    """Response schema for the accuracy summary endpoint."""

    ticker: str | None = None
    validated: int
    accurate: int
    hit_rate: float


class ValidationResponse(BaseModel):
    """Response schema for an on-demand validation pass."""

    validated: int
    errors: int
    total_checked: int
    skipped: int
    message: str


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    detail: str | None = None
