"""
Use case: Forecast the close price of a ticker on a future date.

Input: ForecastPriceCommand (ticker, market, target_date)
Output: ForecastPriceResult
Side effects: Persists one PredictionRecord on success. Nothing on failure.
Failure cases: InvalidRequestError, InsufficientDataError, TrainingError,
    UpstreamFetchError, PersistenceError.

Stages run in order and stop at the first failure:
    RECEIVED → VALIDATED → DATA_ASSEMBLED → TRAINED → PREDICTED
    → BOUNDED → PERSISTED → RESPONDED
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Callable

from app.application.forecasting.dtos import ForecastPriceCommand, ForecastPriceResult
from app.domain.forecasting.entities import (
    DailyBar,
    MacroSnapshot,
    Market,
    PredictionRecord,
)
from app.domain.forecasting.errors import (
    ForecastingDomainError,
    InsufficientDataError,
    InvalidRequestError,
    TrainingError,
)
from app.domain.forecasting.ports import (
    MacroDataProvider,
    PredictionRepository,
    PriceHistoryProvider,
)
from app.domain.forecasting.tickers import normalize_ticker, parse_market
from prediction.config import FEATURE_COLUMNS, ForecastingConfig, config
from prediction.features.pipeline import FeatureEngineer, TrainingSet
from prediction.models.bounds import compute_bounds
from prediction.models.linear import LinearModel, LinearRegressionEngine
from prediction.utils.metrics import FitMetrics

logger = logging.getLogger(__name__)


class ForecastStage(Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    DATA_ASSEMBLED = "data_assembled"
    TRAINED = "trained"
    PREDICTED = "predicted"
    BOUNDED = "bounded"
    PERSISTED = "persisted"
    RESPONDED = "responded"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class ForecastPriceUseCase:
    """Orchestrates a single forecast request.

    Fetches history and macro data concurrently, engineers features
    with the horizon baked into the target, fits a linear model on the
    earliest 80% of rows, scores it on the remaining 20%, predicts from
    the latest row and clamps the prediction into its 2-sigma band.
    Each request builds its own training set and model.
    """

    def __init__(
        self,
        history_provider: PriceHistoryProvider,
        macro_provider: MacroDataProvider,
        repository: PredictionRepository,
        cfg: ForecastingConfig | None = None,
        engineer: FeatureEngineer | None = None,
        engine: LinearRegressionEngine | None = None,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self._history_provider = history_provider
        self._macro_provider = macro_provider
        self._repository = repository
        self._cfg = cfg or config
        self._engineer = engineer or FeatureEngineer(self._cfg.features)
        self._engine = engine or LinearRegressionEngine()
        self._today = today

    def execute(self, command: ForecastPriceCommand) -> ForecastPriceResult:
        """Run the forecast use case.

        Args:
            command: The forecast request.

        Returns:
            The rounded forecast, already persisted.

        Raises:
            ForecastingDomainError: Any stage failure, unchanged.
        """
        stage = ForecastStage.RECEIVED
        try:
            today = self._today()
            ticker, market, target_date = self._validate(command, today)
            days_ahead = (target_date - today).days
            stage = ForecastStage.VALIDATED
            logger.info(
                "Forecasting %s (%s) for %s, %d days ahead.",
                ticker,
                market.value,
                target_date,
                days_ahead,
            )

            bars, macro = self._assemble(ticker, today)
            training_set = self._build_training_set(bars, macro, days_ahead)
            stage = ForecastStage.DATA_ASSEMBLED

            model, metrics, train_size = self._train(training_set)
            stage = ForecastStage.TRAINED

            raw_prediction = self._engine.predict(model, training_set.latest_features)
            if not math.isfinite(raw_prediction):
                raise TrainingError("model produced a non-finite prediction")
            stage = ForecastStage.PREDICTED

            current_price = training_set.latest_close
            volatility = training_set.latest_volatility
            bounds = compute_bounds(
                current_price, volatility, days_ahead, self._cfg.model.confidence_z
            )
            predicted_price = bounds.clamp(raw_prediction)
            if predicted_price != raw_prediction:
                logger.info(
                    "Clamped raw prediction %.4f into [%.4f, %.4f].",
                    raw_prediction,
                    bounds.lower,
                    bounds.upper,
                )
            stage = ForecastStage.BOUNDED

            record = PredictionRecord(
                ticker=ticker,
                market=market,
                target_date=target_date,
                predicted_price=predicted_price,
                lower_bound=bounds.lower,
                upper_bound=bounds.upper,
                current_price=current_price,
                days_ahead=days_ahead,
                r_squared=metrics.r_squared,
                training_samples=train_size,
                volatility=volatility,
                mae=metrics.mae,
                input_features=dict(
                    zip(FEATURE_COLUMNS, map(float, training_set.latest_features))
                ),
                created_at=datetime.now(timezone.utc),
            )
            self._repository.add(record)
            stage = ForecastStage.PERSISTED
        except ForecastingDomainError as exc:
            logger.warning("Forecast failed after stage %s: %s", stage.value, exc.message)
            raise

        result = ForecastPriceResult(
            prediction_id=record.id,
            ticker=ticker,
            market=market.value,
            target_date=target_date,
            days_ahead=days_ahead,
            current_price=round(current_price, 2),
            predicted_price=round(predicted_price, 2),
            lower_bound=round(bounds.lower, 2),
            upper_bound=round(bounds.upper, 2),
            currency=market.currency,
            r_squared=round(metrics.r_squared, 3),
            mae=round(metrics.mae, 2),
            training_samples=train_size,
            volatility=round(volatility, 4),
        )
        logger.info(
            "Forecast %s for %s: %.2f in [%.2f, %.2f] (R²=%.3f, n=%d). Stage: %s.",
            record.id,
            ticker,
            result.predicted_price,
            result.lower_bound,
            result.upper_bound,
            result.r_squared,
            train_size,
            ForecastStage.RESPONDED.value,
        )
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(
        command: ForecastPriceCommand, today: date
    ) -> tuple[str, Market, date]:
        missing = [
            name
            for name, value in (
                ("ticker", command.ticker),
                ("market", command.market),
                ("target_date", command.target_date),
            )
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise InvalidRequestError(f"missing required fields: {', '.join(missing)}")

        market = parse_market(command.market)
        ticker = normalize_ticker(command.ticker, market)
        if command.target_date <= today:
            raise InvalidRequestError("target date must be in the future")
        return ticker, market, command.target_date

    def _assemble(self, ticker: str, today: date) -> tuple[list[DailyBar], MacroSnapshot]:
        """Fetch history and macro readings concurrently."""
        start = today - timedelta(days=self._cfg.model.history_lookback_days)
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="forecast-fetch") as pool:
            history_future = pool.submit(
                self._history_provider.get_daily_bars, ticker, start, today
            )
            macro_future = pool.submit(self._fetch_macro)
            bars = history_future.result()
            macro = macro_future.result()

        min_bars = self._cfg.model.min_history_bars
        if len(bars) < min_bars:
            raise InsufficientDataError(min_bars, len(bars), "daily bars")
        return bars, macro

    def _fetch_macro(self) -> MacroSnapshot:
        try:
            return self._macro_provider.get_latest()
        except ForecastingDomainError as exc:
            logger.warning("Macro data unavailable, using defaults: %s", exc.message)
            return MacroSnapshot()

    def _build_training_set(
        self, bars: list[DailyBar], macro: MacroSnapshot, days_ahead: int
    ) -> TrainingSet:
        training_set = self._engineer.engineer(bars, macro, horizon=days_ahead)
        required = days_ahead + self._cfg.model.horizon_margin_rows
        if training_set.processed_rows < required:
            raise InsufficientDataError(
                required, training_set.processed_rows, "processed rows"
            )
        return training_set

    def _train(self, training_set: TrainingSet) -> tuple[LinearModel, FitMetrics, int]:
        """Fit on the earlier partition and score on the later one."""
        train_x, train_y, test_x, test_y = training_set.split(self._cfg.model.train_ratio)
        model = self._engine.fit(train_x, train_y)

        in_sample = self._engine.evaluate(model, train_x, train_y)
        logger.debug("Training-set fit: %s", in_sample.to_dict())

        if len(test_y) == 0:
            logger.warning("Empty holdout partition; reporting training-set metrics.")
            return model, in_sample, len(train_y)

        holdout = self._engine.evaluate(model, test_x, test_y)
        logger.debug("Holdout fit: %s", holdout.to_dict())
        return model, holdout, len(train_y)
