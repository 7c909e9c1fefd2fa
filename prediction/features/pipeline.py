"""
Feature engineering for the linear price model.

Turns an ordered sequence of daily bars plus a macro snapshot into a
fixed-width feature matrix and a horizon-shifted target vector:

    features[i] = (close_lag_1, sma_20, sma_50, rsi_14, atr_14,
                   volatility_20, volume_ratio, fed_funds_rate, cpi) at anchor i
    targets[i]  = close at anchor i + horizon

Anchors inside the warm-up window, or with any undefined indicator,
are dropped rather than padded.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from app.domain.forecasting.entities import DailyBar, MacroSnapshot
from app.domain.forecasting.errors import InsufficientDataError, TrainingError
from prediction.config import FEATURE_COLUMNS, FeatureConfig, config
from prediction.features import technical

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TrainingSet:
    """Index-aligned feature matrix and targets, plus the inference row.

    Attributes:
        features: Matrix of shape (n_rows, len(FEATURE_COLUMNS)).
        targets: Close price `horizon` bars after each row's anchor.
        anchor_dates: Date of the anchor bar for each row.
        latest_features: Feature vector anchored on the most recent usable bar.
        latest_close: Close of that bar.
        latest_volatility: Log-return volatility at that bar.
        processed_rows: Anchors with all indicators defined, with or without target.
        horizon: Target offset in bars.
    """

    features: np.ndarray
    targets: np.ndarray
    anchor_dates: tuple[date, ...]
    latest_features: np.ndarray
    latest_close: float
    latest_volatility: float
    processed_rows: int
    horizon: int

    def __len__(self) -> int:
        return len(self.targets)

    @property
    def columns(self) -> tuple[str, ...]:
        return FEATURE_COLUMNS

    def split(
        self, train_ratio: float
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Split rows by position: earlier rows train, later rows test.

        Returns:
            (train_X, train_y, test_X, test_y)
        """
        cut = int(len(self) * train_ratio)
        return (
            self.features[:cut],
            self.targets[:cut],
            self.features[cut:],
            self.targets[cut:],
        )


class FeatureEngineer:
    """Builds TrainingSets from raw bars.

    Stateless apart from its configuration; safe to share across requests.
    """

    def __init__(self, cfg: FeatureConfig | None = None) -> None:
        self._cfg = cfg or config.features

    @property
    def config(self) -> FeatureConfig:
        return self._cfg

    def build_frame(
        self, history: Sequence[DailyBar], macro: Optional[MacroSnapshot] = None
    ) -> pd.DataFrame:
        """Compute every indicator over the whole history.

        Returns:
            DataFrame indexed by bar position with `date`, `close` and one
            column per feature. Undefined values are NaN.
        """
        cfg = self._cfg
        macro = macro or MacroSnapshot()

        dates = [bar.date for bar in history]
        close = np.array([bar.close for bar in history], dtype=float)
        high = np.array([bar.high for bar in history], dtype=float)
        low = np.array([bar.low for bar in history], dtype=float)
        volume = np.array([bar.volume for bar in history], dtype=float)

        fed_funds = (
            macro.fed_funds_rate
            if macro.fed_funds_rate is not None
            else cfg.default_fed_funds_rate
        )
        cpi = macro.cpi if macro.cpi is not None else cfg.default_cpi

        frame = pd.DataFrame({"date": dates, "close": close})
        frame["close_lag_1"] = frame["close"].shift(1)
        frame["sma_20"] = technical.sma(close, cfg.sma_short_window)
        frame["sma_50"] = technical.sma(close, cfg.sma_long_window)
        frame["rsi_14"] = technical.rsi(close, cfg.rsi_window)
        frame["atr_14"] = technical.atr(high, low, close, cfg.atr_window)
        frame["volatility_20"] = technical.log_return_volatility(
            close, cfg.volatility_window
        )
        frame["volume_ratio"] = technical.volume_ratio(volume, cfg.volume_sma_window)
        frame["fed_funds_rate"] = float(fed_funds)
        frame["cpi"] = float(cpi)
        return frame

    def engineer(
        self,
        history: Sequence[DailyBar],
        macro: Optional[MacroSnapshot] = None,
        horizon: int = 1,
    ) -> TrainingSet:
        """Build the training rows and the inference row.

        Args:
            history: Bars ordered by date ascending (order is trusted).
            macro: Latest macro readings; missing fields use defaults.
            horizon: Number of bars between a row's anchor and its target.

        Returns:
            A TrainingSet with at least `min_training_samples` rows.

        Raises:
            InsufficientDataError: If too few rows survive the warm-up filter.
            TrainingError: If horizon is not positive.
        """
        if horizon < 1:
            raise TrainingError(f"horizon must be >= 1, got {horizon}")

        cfg = self._cfg
        if not history:
            raise InsufficientDataError(cfg.min_training_samples, 0, "training rows")

        frame = self.build_frame(history, macro)
        columns = list(FEATURE_COLUMNS)

        defined = frame[columns].notna().all(axis=1).to_numpy()
        after_warmup = np.arange(len(frame)) >= cfg.warmup_window - 1
        anchors = np.flatnonzero(defined & after_warmup)

        train_anchors = anchors[anchors + horizon < len(frame)]
        if len(train_anchors) < max(cfg.min_training_samples, 1):
            raise InsufficientDataError(
                cfg.min_training_samples, len(train_anchors), "training rows"
            )

        values = frame[columns].to_numpy(dtype=float)
        close = frame["close"].to_numpy(dtype=float)
        latest = anchors[-1]

        training_set = TrainingSet(
            features=values[train_anchors],
            targets=close[train_anchors + horizon],
            anchor_dates=tuple(frame["date"].iloc[train_anchors]),
            latest_features=values[latest],
            latest_close=float(close[latest]),
            latest_volatility=float(frame["volatility_20"].iloc[latest]),
            processed_rows=len(anchors),
            horizon=horizon,
        )
        logger.debug(
            "Engineered %d training rows (%d processed, horizon=%d) from %d bars.",
            len(training_set),
            training_set.processed_rows,
            horizon,
            len(history),
        )
        return training_set
