"""
Fit-quality metrics for regression models.

Provides:
- R² (coefficient of determination), raw and clamped to [0, 1]
- Mean absolute error
- Interval calibration (share of actuals inside their bounds)
"""

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitMetrics:
    """Evaluation of a model on one partition."""

    r_squared: float
    raw_r_squared: float
    mae: float
    sample_size: int

    def to_dict(self) -> dict:
        return {
            "r_squared": round(self.r_squared, 4),
            "raw_r_squared": round(self.raw_r_squared, 4),
            "mae": round(self.mae, 6),
            "sample_size": self.sample_size,
        }


def r_squared(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Return 1 - SS_res / SS_tot.

    May be negative when the model is worse than predicting the mean.
    A constant target (SS_tot == 0) yields 0.0.
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    ss_res = float(np.sum((y_true - y_pred) ** 2))
    ss_tot = float(np.sum((y_true - np.mean(y_true)) ** 2))
    if ss_tot == 0:
        return 0.0
    return 1.0 - ss_res / ss_tot


def clamp_unit(value: float) -> float:
    """Clamp a ratio into [0, 1]; NaN maps to 0."""
    if not np.isfinite(value):
        return 0.0
    return float(min(1.0, max(0.0, value)))


def mean_absolute_error(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    if y_true.size == 0:
        return 0.0
    return float(np.mean(np.abs(y_true - y_pred)))


def interval_coverage(
    y_true: np.ndarray, y_lower: np.ndarray, y_upper: np.ndarray
) -> float:
    """Share of actual values falling inside [lower, upper], inclusive."""
    y_true = np.asarray(y_true, dtype=float)
    if y_true.size == 0:
        return 0.0
    inside = (y_true >= np.asarray(y_lower)) & (y_true <= np.asarray(y_upper))
    return float(np.mean(inside))


def evaluate_fit(y_true: np.ndarray, y_pred: np.ndarray) -> FitMetrics:
    """Compute R² (raw and clamped) and MAE for one partition."""
    raw = r_squared(y_true, y_pred)
    return FitMetrics(
        r_squared=clamp_unit(raw),
        raw_r_squared=raw,
        mae=mean_absolute_error(y_true, y_pred),
        sample_size=int(np.asarray(y_true).size),
    )
