"""
Data Transfer Objects for the forecasting application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class ForecastPriceCommand:
    """Input DTO for requesting a price forecast.

    Attributes:
        ticker: Raw ticker as entered by the caller.
        market: Market code ("US" or "TSX").
        target_date: Day the forecast is for. Must be after today.
    """

    ticker: Optional[str]
    market: Optional[str]
    target_date: Optional[date]


@dataclass(frozen=True)
class ForecastPriceResult:
    """Output DTO for a forecast, rounded for display.

    Attributes:
        prediction_id: Identifier of the stored prediction record.
        ticker: Normalized ticker.
        market: Market code.
        target_date: Day the forecast is for.
        days_ahead: Calendar days between today and target_date.
        current_price: Latest close.
        predicted_price: Point forecast, clamped into its bounds.
        lower_bound: Lower edge of the 2-sigma interval.
        upper_bound: Upper edge of the 2-sigma interval.
        currency: "USD" or "CAD".
        r_squared: Holdout R², clamped to [0, 1].
        mae: Holdout mean absolute error.
        training_samples: Rows the model was fitted on.
        volatility: Daily log-return volatility at the latest bar.
    """

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


@dataclass(frozen=True)
class ValidatePredictionsResult:
    """Output DTO for one accuracy validation pass.

    Attributes:
        validated: Records whose outcome this pass wrote.
        errors: Records skipped because of fetch or update failures.
        total_checked: Records pulled from the store.
        skipped: Records another run claimed first.
        message: Human-readable status.
    """

    validated: int
    errors: int
    total_checked: int
    skipped: int = 0
    message: str = "Validation complete"


@dataclass(frozen=True)
class GetPredictionHistoryQuery:
    """Input DTO for listing stored predictions.

    Attributes:
        ticker: Optional ticker filter (normalized by the caller's market).
        market: Market used to normalize the ticker.
        limit: Maximum number of records.
    """

    ticker: Optional[str] = None
    market: str = "US"
    limit: int = 20


@dataclass(frozen=True)
class PredictionRecordResult:
    """Output DTO for a stored prediction."""

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
    actual_price: Optional[float]
    is_accurate: Optional[bool]
    created_at: Optional[datetime]


@dataclass(frozen=True)
class AccuracySummaryResult:
    """Output DTO for the hit rate of validated predictions."""

    ticker: Optional[str]
    validated: int
    accurate: int
    hit_rate: float
