"""
Domain entities for the forecasting bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class Market(Enum):
    """Listing market of a ticker."""

    US = "US"
    TSX = "TSX"

    @property
    def currency(self) -> str:
        return "CAD" if self is Market.TSX else "USD"


@dataclass(frozen=True)
class DailyBar:
    """A single day's OHLCV bar for an instrument."""

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class MacroSnapshot:
    """Most recent macroeconomic readings.

    Either field may be None when the provider has no reading;
    the feature pipeline substitutes defaults.
    """

    fed_funds_rate: Optional[float] = None
    cpi: Optional[float] = None


@dataclass(frozen=True)
class PredictionRecord:
    """A persisted forecast awaiting (or holding) its realized outcome.

    Created without actual_price / is_accurate. The accuracy validator
    sets both exactly once, after target_date has passed.
    """

    ticker: str
    market: Market
    target_date: date
    predicted_price: float
    lower_bound: float
    upper_bound: float
    current_price: float
    days_ahead: int
    r_squared: float
    training_samples: int
    volatility: float = 0.0
    mae: Optional[float] = None
    input_features: dict[str, float] = field(default_factory=dict)
    actual_price: Optional[float] = None
    is_accurate: Optional[bool] = None
    id: UUID = field(default_factory=uuid4)
    created_at: Optional[datetime] = None

    @property
    def is_validated(self) -> bool:
        return self.actual_price is not None

    def brackets(self, price: float) -> bool:
        """Return True if price falls inside the published interval (inclusive)."""
        return self.lower_bound <= price <= self.upper_bound


@dataclass(frozen=True)
class AccuracySummary:
    """Hit rate of validated predictions, optionally for a single ticker."""

    ticker: Optional[str]
    validated: int
    accurate: int

    @property
    def hit_rate(self) -> float:
        if self.validated == 0:
            return 0.0
        return self.accurate / self.validated
