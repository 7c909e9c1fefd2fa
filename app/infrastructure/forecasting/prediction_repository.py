"""
Adapter: Prediction record repository.

Implements PredictionRepository port on the stock_predictions table.
One row per forecast request. Outcomes are written with a conditional
update so concurrent validation runs cannot both claim a record.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    case,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.domain.forecasting.entities import AccuracySummary, Market, PredictionRecord
from app.domain.forecasting.errors import PersistenceError
from app.domain.forecasting.ports import PredictionRepository

logger = logging.getLogger(__name__)

metadata = MetaData()

stock_predictions = Table(
    "stock_predictions",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("ticker", String(16), nullable=False, index=True),
    Column("market", String(8), nullable=False),
    Column("target_date", Date, nullable=False, index=True),
    Column("predicted_price", Float, nullable=False),
    Column("lower_bound", Float, nullable=False),
    Column("upper_bound", Float, nullable=False),
    Column("current_price", Float, nullable=False),
    Column("days_ahead", Integer, nullable=False),
    Column("r_squared", Float, nullable=False),
    Column("training_samples", Integer, nullable=False),
    Column("volatility", Float, nullable=False, default=0.0),
    Column("mae", Float, nullable=True),
    Column("input_features", JSON, nullable=True),
    Column("actual_price", Float, nullable=True),
    Column("is_accurate", Boolean, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=True),
    Column("validated_at", DateTime(timezone=True), nullable=True),
)


def ensure_schema(engine: Engine) -> None:
    """Create the stock_predictions table if it does not exist."""
    metadata.create_all(engine, tables=[stock_predictions])


class PredictionRepositoryAdapter(PredictionRepository):
    """SQLAlchemy implementation of the prediction store."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, record: PredictionRecord) -> None:
        """Insert a new prediction record.

        Raises:
            PersistenceError: If the insert fails.
        """
        try:
            with self._engine.begin() as conn:
                conn.execute(insert(stock_predictions).values(**_to_row(record)))
        except SQLAlchemyError as exc:
            raise PersistenceError("insert", type(exc).__name__) from exc
        logger.debug("Stored prediction %s for %s.", record.id, record.ticker)

    def get_pending(self, as_of, limit: int) -> list[PredictionRecord]:
        """Return matured records without an actual price, oldest target first."""
        query = (
            select(stock_predictions)
            .where(
                stock_predictions.c.target_date <= as_of,
                stock_predictions.c.actual_price.is_(None),
            )
            .order_by(stock_predictions.c.target_date.asc())
            .limit(limit)
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(query).fetchall()
        except SQLAlchemyError as exc:
            raise PersistenceError("select pending", type(exc).__name__) from exc

        logger.info("Fetched %d pending predictions (as of %s).", len(rows), as_of)
        return [_to_record(row._mapping) for row in rows]

    def record_outcome(
        self, record_id: UUID, actual_price: float, is_accurate: bool
    ) -> bool:
        """Set actual_price / is_accurate only if actual_price is still NULL.

        Returns:
            True if exactly this call wrote the outcome.

        Raises:
            PersistenceError: If the update fails.
        """
        statement = (
            update(stock_predictions)
            .where(
                stock_predictions.c.id == str(record_id),
                stock_predictions.c.actual_price.is_(None),
            )
            .values(
                actual_price=actual_price,
                is_accurate=is_accurate,
                validated_at=datetime.now(timezone.utc),
            )
        )
        try:
            with self._engine.begin() as conn:
                result = conn.execute(statement)
        except SQLAlchemyError as exc:
            raise PersistenceError("update outcome", type(exc).__name__) from exc
        return result.rowcount == 1

    def list_recent(
        self, ticker: Optional[str] = None, limit: int = 20
    ) -> list[PredictionRecord]:
        query = select(stock_predictions)
        if ticker:
            query = query.where(stock_predictions.c.ticker == ticker)
        query = query.order_by(stock_predictions.c.created_at.desc()).limit(limit)
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(query).fetchall()
        except SQLAlchemyError as exc:
            raise PersistenceError("select recent", type(exc).__name__) from exc
        return [_to_record(row._mapping) for row in rows]

    def summarize_accuracy(self, ticker: Optional[str] = None) -> AccuracySummary:
        accurate = func.coalesce(
            func.sum(case((stock_predictions.c.is_accurate.is_(True), 1), else_=0)), 0
        )
        query = select(func.count().label("validated"), accurate.label("accurate")).where(
            stock_predictions.c.actual_price.is_not(None)
        )
        if ticker:
            query = query.where(stock_predictions.c.ticker == ticker)
        try:
            with self._engine.connect() as conn:
                row = conn.execute(query).one()
        except SQLAlchemyError as exc:
            raise PersistenceError("summarize accuracy", type(exc).__name__) from exc
        return AccuracySummary(
            ticker=ticker, validated=int(row.validated), accurate=int(row.accurate)
        )


def _to_row(record: PredictionRecord) -> dict[str, Any]:
    return {
        "id": str(record.id),
        "ticker": record.ticker,
        "market": record.market.value,
        "target_date": record.target_date,
        "predicted_price": record.predicted_price,
        "lower_bound": record.lower_bound,
        "upper_bound": record.upper_bound,
        "current_price": record.current_price,
        "days_ahead": record.days_ahead,
        "r_squared": record.r_squared,
        "training_samples": record.training_samples,
        "volatility": record.volatility,
        "mae": record.mae,
        "input_features": dict(record.input_features),
        "actual_price": record.actual_price,
        "is_accurate": record.is_accurate,
        "created_at": record.created_at,
    }


def _to_record(row) -> PredictionRecord:
    return PredictionRecord(
        id=UUID(row["id"]),
        ticker=row["ticker"],
        market=Market(row["market"]),
        target_date=row["target_date"],
        predicted_price=row["predicted_price"],
        lower_bound=row["lower_bound"],
        upper_bound=row["upper_bound"],
        current_price=row["current_price"],
        days_ahead=row["days_ahead"],
        r_squared=row["r_squared"],
        training_samples=row["training_samples"],
        volatility=row["volatility"] or 0.0,
        mae=row["mae"],
        input_features=row["input_features"] or {},
        actual_price=row["actual_price"],
        is_accurate=row["is_accurate"],
        created_at=row["created_at"],
    )
