"""
Technical indicators.

Stateless transforms over price and volume series:
- Simple moving average
- RSI (momentum oscillator)
- ATR (range volatility)
- Rolling standard deviation of log returns

Every function returns a float array of the same length as its input.
Entries without enough trailing history are NaN. A value at index i
only uses observations at or before i.
"""

import numpy as np
import pandas as pd


def _as_series(values) -> pd.Series:
    return pd.Series(np.asarray(values, dtype=float))


def sma(values, period: int) -> np.ndarray:
    """Arithmetic mean of the trailing `period` values.

    The first `period - 1` entries are NaN.

    >>> sma([1, 2, 3, 4, 5], 3).tolist()
    [nan, nan, 2.0, 3.0, 4.0]
    """
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")
    series = _as_series(values)
    return series.rolling(window=period, min_periods=period).mean().to_numpy()


def rsi(prices, period: int = 14) -> np.ndarray:
    """Relative Strength Index on a 0-100 scale.

    Uses simple averages of the trailing `period` gains and losses.
    Saturates at 100 when the average loss is exactly zero. The first
    `period` entries are NaN (the first price has no change).
    """
    close = _as_series(prices)
    delta = close.diff()
    gains = delta.clip(lower=0)
    losses = -delta.clip(upper=0)
    avg_gain = gains.rolling(window=period, min_periods=period).mean()
    avg_loss = losses.rolling(window=period, min_periods=period).mean()

    with np.errstate(divide="ignore", invalid="ignore"):
        rs = avg_gain / avg_loss
        result = 100 - (100 / (1 + rs))
    result = result.mask(avg_loss == 0, 100.0)
    return result.to_numpy()


def true_range(high, low, close) -> np.ndarray:
    """Per-bar true range; the first bar has no previous close and uses high - low."""
    high_s, low_s, close_s = _as_series(high), _as_series(low), _as_series(close)
    prev_close = close_s.shift(1)
    ranges = pd.concat(
        [
            high_s - low_s,
            (high_s - prev_close).abs(),
            (low_s - prev_close).abs(),
        ],
        axis=1,
    )
    return ranges.max(axis=1, skipna=True).to_numpy()


def atr(high, low, close, period: int = 14) -> np.ndarray:
    """Average True Range: moving average of the true range."""
    return sma(true_range(high, low, close), period)


def log_return_volatility(prices, period: int = 20) -> np.ndarray:
    """Population standard deviation of the trailing `period` log returns.

    NaN until `period` returns exist, i.e. for the first `period` entries.
    """
    close = _as_series(prices)
    with np.errstate(divide="ignore", invalid="ignore"):
        log_returns = np.log(close / close.shift(1))
    return (
        log_returns.rolling(window=period, min_periods=period).std(ddof=0).to_numpy()
    )


def volume_ratio(volume, period: int = 20) -> np.ndarray:
    """Volume relative to its own moving average.

    A zero average is replaced by 1 so the ratio stays finite.
    """
    vol = np.asarray(volume, dtype=float)
    average = sma(vol, period)
    denominator = np.where(average == 0, 1.0, average)
    return vol / denominator
