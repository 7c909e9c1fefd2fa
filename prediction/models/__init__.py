"""
Models sub-package.

- `LinearRegressionEngine`: OLS with intercept: fit(X, y) → predict(model, x) → evaluate(model, X, y)
- `compute_bounds`: volatility interval around the current price
"""

from prediction.models.bounds import ConfidenceBounds, compute_bounds
from prediction.models.linear import LinearModel, LinearRegressionEngine

__all__ = [
    "ConfidenceBounds",
    "compute_bounds",
    "LinearModel",
    "LinearRegressionEngine",
]
