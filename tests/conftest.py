"""
Shared fixtures and in-memory fakes for the forecasting tests.

Fakes implement the domain ports so use cases can be exercised
without network or database access.
"""

from dataclasses import replace
from datetime import date, timedelta
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.domain.forecasting.entities import (
    AccuracySummary,
    DailyBar,
    MacroSnapshot,
    Market,
    PredictionRecord,
)
from app.domain.forecasting.ports import (
    MacroDataProvider,
    PredictionRepository,
    PriceHistoryProvider,
    RealizedPriceProvider,
)

TODAY = date(2026, 10, 18)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_bars(
    closes, start: date = date(2026, 1, 5), volume: float = 1_000_000.0
) -> list[DailyBar]:
    """Daily bars with high/low half a dollar around each close."""
    return [
        DailyBar(
            date=start + timedelta(days=i),
            open=float(c),
            high=float(c) + 0.5,
            low=float(c) - 0.5,
            close=float(c),
            volume=volume,
        )
        for i, c in enumerate(closes)
    ]


def stepped_closes(n: int = 120, start: float = 100.0) -> list[float]:
    """Strictly increasing closes: four +0.10 days then one +5.00 day, repeating."""
    closes = [start]
    for i in range(1, n):
        closes.append(closes[-1] + (5.0 if i % 5 == 0 else 0.1))
    return closes


def make_record(**overrides) -> PredictionRecord:
    fields = dict(
        ticker="AAPL",
        market=Market.US,
        target_date=TODAY - timedelta(days=1),
        predicted_price=105.0,
        lower_bound=95.0,
        upper_bound=115.0,
        current_price=100.0,
        days_ahead=5,
        r_squared=0.8,
        training_samples=52,
        volatility=0.02,
        mae=1.25,
        input_features={"close_lag_1": 99.5},
    )
    fields.update(overrides)
    return PredictionRecord(**fields)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeHistoryProvider(PriceHistoryProvider):
    def __init__(self, bars=None, error: Exception | None = None) -> None:
        self.bars = list(bars or [])
        self.error = error
        self.calls: list[tuple[str, date, date]] = []

    def get_daily_bars(self, ticker, start, end):
        self.calls.append((ticker, start, end))
        if self.error is not None:
            raise self.error
        return list(self.bars)


class FakeMacroProvider(MacroDataProvider):
    def __init__(self, snapshot: MacroSnapshot | None = None, error: Exception | None = None) -> None:
        self.snapshot = snapshot or MacroSnapshot(fed_funds_rate=4.33, cpi=321.5)
        self.error = error

    def get_latest(self):
        if self.error is not None:
            raise self.error
        return self.snapshot


class FakeRealizedPrices(RealizedPriceProvider):
    """Returns configured closes; an Exception value is raised instead."""

    def __init__(self, prices: dict | None = None) -> None:
        self.prices = dict(prices or {})
        self.calls: list[tuple[str, date]] = []

    def get_close(self, ticker, on):
        self.calls.append((ticker, on))
        value = self.prices.get((ticker, on))
        if isinstance(value, Exception):
            raise value
        return value


class InMemoryPredictionRepository(PredictionRepository):
    def __init__(self, records=None) -> None:
        self.records: dict = {r.id: r for r in (records or [])}
        self.fail_on_outcome: Exception | None = None

    def add(self, record):
        self.records[record.id] = record

    def get_pending(self, as_of, limit):
        pending = [
            r
            for r in self.records.values()
            if r.target_date <= as_of and r.actual_price is None
        ]
        return sorted(pending, key=lambda r: r.target_date)[:limit]

    def record_outcome(self, record_id, actual_price, is_accurate):
        if self.fail_on_outcome is not None:
            raise self.fail_on_outcome
        record = self.records[record_id]
        if record.actual_price is not None:
            return False
        self.records[record_id] = replace(
            record, actual_price=actual_price, is_accurate=is_accurate
        )
        return True

    def list_recent(self, ticker: Optional[str] = None, limit: int = 20):
        records = [
            r for r in self.records.values() if ticker is None or r.ticker == ticker
        ]
        return records[::-1][:limit]

    def summarize_accuracy(self, ticker=None):
        validated = [
            r
            for r in self.records.values()
            if r.actual_price is not None and (ticker is None or r.ticker == ticker)
        ]
        return AccuracySummary(
            ticker=ticker,
            validated=len(validated),
            accurate=sum(1 for r in validated if r.is_accurate),
        )


class RecordingSleep:
    """Stand-in for time.sleep that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def stepped_bars() -> list[DailyBar]:
    return make_bars(stepped_closes(120), start=TODAY - timedelta(days=130))


@pytest.fixture
def repository() -> InMemoryPredictionRepository:
    return InMemoryPredictionRepository()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite shared across threads and connections."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()
