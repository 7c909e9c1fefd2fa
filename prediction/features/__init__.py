"""
Feature engineering sub-package.

Indicators (`technical`)
------------------------
- `sma`, `rsi`, `atr`, `true_range`, `log_return_volatility`, `volume_ratio`
  Pure functions over price/volume arrays; NaN where undefined.

Orchestrator
------------
- `FeatureEngineer.engineer(bars, macro, horizon)` → `TrainingSet`
"""

from prediction.features.pipeline import FeatureEngineer, TrainingSet
from prediction.features.technical import (
    atr,
    log_return_volatility,
    rsi,
    sma,
    true_range,
    volume_ratio,
)

__all__ = [
    "FeatureEngineer",
    "TrainingSet",
    "atr",
    "log_return_volatility",
    "rsi",
    "sma",
    "true_range",
    "volume_ratio",
]
