"""
Utilities sub-package.

- `FitMetrics` / `evaluate_fit`: R², MAE and interval coverage helpers
"""

from prediction.utils.metrics import FitMetrics, evaluate_fit, interval_coverage

__all__ = [
    "FitMetrics",
    "evaluate_fit",
    "interval_coverage",
]
