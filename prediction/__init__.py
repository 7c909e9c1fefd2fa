"""
PriceCast Prediction Module
===========================

Numeric core for close-price forecasting.

Architecture
------------
- **Indicators**: SMA, RSI, ATR, log-return volatility, volume ratio
- **Features**: 9-field feature rows with the horizon baked into the target
- **Model**: ordinary least squares with an intercept, fitted per request
- **Bounds**: 2-sigma interval from daily volatility scaled by sqrt(days)

Public API
----------
    from prediction import FeatureEngineer, LinearRegressionEngine, compute_bounds
    from prediction.config import config
"""

from prediction.config import FEATURE_COLUMNS, ForecastingConfig, config
from prediction.features.pipeline import FeatureEngineer, TrainingSet
from prediction.models.bounds import ConfidenceBounds, compute_bounds
from prediction.models.linear import LinearModel, LinearRegressionEngine
from prediction.utils.metrics import FitMetrics

__all__ = [
    "FEATURE_COLUMNS",
    "ForecastingConfig",
    "config",
    "FeatureEngineer",
    "TrainingSet",
    "ConfidenceBounds",
    "compute_bounds",
    "LinearModel",
    "LinearRegressionEngine",
    "FitMetrics",
]
