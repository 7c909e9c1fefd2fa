"""
Volatility-driven confidence bounds.

sigma = daily_volatility * sqrt(days_ahead)
lower = current_price * (1 - z * sigma)
upper = current_price * (1 + z * sigma)

With z = 2 this is the 2-sigma band published with every forecast.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class ConfidenceBounds:
    lower: float
    upper: float

    def clamp(self, value: float) -> float:
        """Pull value into [lower, upper]."""
        return max(self.lower, min(value, self.upper))

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper


def compute_bounds(
    current_price: float,
    daily_volatility: float,
    days_ahead: int,
    z: float = 2.0,
) -> ConfidenceBounds:
    if days_ahead < 1:
        raise ValueError(f"days_ahead must be >= 1, got {days_ahead}")
    sigma = daily_volatility * math.sqrt(days_ahead)
    return ConfidenceBounds(
        lower=current_price * (1 - z * sigma),
        upper=current_price * (1 + z * sigma),
    )
