"""
Port interfaces (ABCs) for the forecasting bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from app.domain.forecasting.entities import (
    AccuracySummary,
    DailyBar,
    MacroSnapshot,
    PredictionRecord,
)


class PriceHistoryProvider(ABC):
    """Port for retrieving daily OHLCV history."""

    @abstractmethod
    def get_daily_bars(self, ticker: str, start: date, end: date) -> list[DailyBar]:
        """Return bars for a ticker within the date range, ordered by date ascending.

        Raises:
            UpstreamFetchError: If the provider fails or returns no data.
        """
        raise NotImplementedError


class MacroDataProvider(ABC):
    """Port for retrieving the latest macroeconomic readings."""

    @abstractmethod
    def get_latest(self) -> MacroSnapshot:
        """Return the latest fed funds rate and CPI.

        Missing readings are returned as None fields, never raised.
        """
        raise NotImplementedError


class RealizedPriceProvider(ABC):
    """Port for retrieving the realized close on a given day."""

    @abstractmethod
    def get_close(self, ticker: str, on: date) -> Optional[float]:
        """Return the close price for (ticker, date), or None when there is no data.

        Raises:
            UpstreamFetchError: If the provider cannot be reached.
        """
        raise NotImplementedError


class PredictionRepository(ABC):
    """Port for persisting and reconciling prediction records."""

    @abstractmethod
    def add(self, record: PredictionRecord) -> None:
        """Persist a new prediction record."""
        raise NotImplementedError

    @abstractmethod
    def get_pending(self, as_of: date, limit: int) -> list[PredictionRecord]:
        """Return records with target_date <= as_of and no actual price yet.

        Args:
            as_of: The reference day (inclusive).
            limit: Maximum number of records to return.

        Returns:
            Records ordered by target_date ascending.
        """
        raise NotImplementedError

    @abstractmethod
    def record_outcome(
        self, record_id: UUID, actual_price: float, is_accurate: bool
    ) -> bool:
        """Write the realized price only if none is stored yet.

        Returns:
            True if this call claimed the record, False if it was already set.
        """
        raise NotImplementedError

    @abstractmethod
    def list_recent(
        self, ticker: Optional[str] = None, limit: int = 20
    ) -> list[PredictionRecord]:
        """Return the most recently created records, newest first."""
        raise NotImplementedError

    @abstractmethod
    def summarize_accuracy(self, ticker: Optional[str] = None) -> AccuracySummary:
        """Return validated and accurate counts, optionally for one ticker."""
        raise NotImplementedError
