"""
Tests for the technical indicator functions.

Covers SMA, RSI, true range / ATR, log-return volatility and
volume ratio, including warm-up NaNs and degenerate inputs.
"""

import math

import numpy as np
import pytest

from prediction.features.technical import (
    atr,
    log_return_volatility,
    rsi,
    sma,
    true_range,
    volume_ratio,
)


class TestSMA:
    def test_trailing_mean(self):
        result = sma([1, 2, 3, 4, 5], 3)
        assert np.isnan(result[:2]).all()
        assert result[2:].tolist() == [2.0, 3.0, 4.0]

    def test_same_length_as_input(self):
        assert len(sma(np.arange(30), 20)) == 30

    def test_period_longer_than_series_is_all_nan(self):
        assert np.isnan(sma([1.0, 2.0], 5)).all()

    def test_rejects_non_positive_period(self):
        with pytest.raises(ValueError):
            sma([1, 2, 3], 0)

    def test_value_uses_only_past_observations(self):
        base = sma([1, 2, 3, 4, 5, 6], 3)
        changed = sma([1, 2, 3, 4, 5, 600], 3)
        np.testing.assert_array_equal(base[:5], changed[:5])


class TestRSI:
    def test_all_gains_saturates_at_100(self):
        prices = np.arange(1, 31, dtype=float)
        result = rsi(prices, 14)
        assert np.isnan(result[:14]).all()
        assert (result[14:] == 100.0).all()

    def test_all_losses_is_zero(self):
        prices = np.arange(30, 0, -1, dtype=float)
        result = rsi(prices, 14)
        assert result[-1] == pytest.approx(0.0)

    def test_balanced_moves_give_fifty(self):
        prices = [10.0, 11.0] * 10
        result = rsi(prices, 4)
        # two +1 and two -1 moves in every window of four changes
        assert result[-1] == pytest.approx(50.0)

    def test_bounded_between_0_and_100(self):
        rng = np.random.default_rng(7)
        prices = 50 + np.cumsum(rng.normal(0, 1, 200))
        values = rsi(prices, 14)
        defined = values[~np.isnan(values)]
        assert ((defined >= 0) & (defined <= 100)).all()


class TestTrueRangeAndATR:
    def test_first_bar_uses_high_minus_low(self):
        result = true_range([11.0, 12.0], [9.0, 10.0], [10.0, 11.0])
        assert result[0] == pytest.approx(2.0)

    def test_gap_up_uses_previous_close(self):
        # prev close 10, next bar trades 14-15
        result = true_range([11.0, 15.0], [9.0, 14.0], [10.0, 14.5])
        assert result[1] == pytest.approx(5.0)

    def test_atr_is_moving_average_of_true_range(self):
        high = [11.0, 12.0, 13.0, 14.0]
        low = [9.0, 10.0, 11.0, 12.0]
        close = [10.0, 11.0, 12.0, 13.0]
        result = atr(high, low, close, period=2)
        assert math.isnan(result[0])
        assert result[1] == pytest.approx(2.0)
        assert result[3] == pytest.approx(2.0)


class TestLogReturnVolatility:
    def test_constant_growth_has_zero_volatility(self):
        prices = 100 * 1.01 ** np.arange(40)
        result = log_return_volatility(prices, 20)
        assert np.isnan(result[:20]).all()
        assert result[20] == pytest.approx(0.0, abs=1e-12)

    def test_population_standard_deviation(self):
        prices = [100.0, 110.0, 100.0, 110.0, 100.0]
        result = log_return_volatility(prices, 4)
        r = math.log(1.1)
        assert result[4] == pytest.approx(np.std([r, -r, r, -r]))

    def test_flat_prices_have_zero_volatility(self):
        result = log_return_volatility([50.0] * 25, 20)
        assert result[-1] == pytest.approx(0.0, abs=1e-12)


class TestVolumeRatio:
    def test_constant_volume_is_one(self):
        result = volume_ratio([1000.0] * 25, 20)
        assert result[-1] == pytest.approx(1.0)

    def test_spike_above_average(self):
        volume = [100.0] * 19 + [300.0]
        result = volume_ratio(volume, 20)
        assert result[-1] == pytest.approx(300.0 / 110.0)

    def test_zero_average_stays_finite(self):
        result = volume_ratio([0.0] * 25, 20)
        assert result[-1] == 0.0
