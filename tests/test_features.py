"""
Tests for the feature engineer.

Covers warm-up filtering, horizon-shifted targets, macro defaults,
the inference row and anti-leakage of the feature rows.
"""

from dataclasses import replace

import numpy as np
import pytest

from app.domain.forecasting.entities import MacroSnapshot
from app.domain.forecasting.errors import InsufficientDataError, TrainingError
from conftest import make_bars, stepped_closes
from prediction.config import FEATURE_COLUMNS, FeatureConfig
from prediction.features.pipeline import FeatureEngineer


@pytest.fixture
def bars():
    return make_bars(stepped_closes(120))


@pytest.fixture
def engineer():
    return FeatureEngineer()


class TestFeatureEngineerShape:
    def test_rows_start_after_warmup(self, engineer, bars):
        ts = engineer.engineer(bars, horizon=5)
        # anchors 49..119 are defined, the last 5 have no target yet
        assert ts.processed_rows == 71
        assert len(ts) == 66
        assert ts.features.shape == (66, len(FEATURE_COLUMNS))
        assert ts.anchor_dates[0] == bars[49].date

    def test_targets_are_shifted_by_horizon(self, engineer, bars):
        ts = engineer.engineer(bars, horizon=5)
        assert ts.targets[0] == pytest.approx(bars[54].close)
        assert ts.targets[-1] == pytest.approx(bars[-1].close)

    def test_no_undefined_values(self, engineer, bars):
        ts = engineer.engineer(bars, horizon=3)
        assert np.isfinite(ts.features).all()
        assert np.isfinite(ts.targets).all()

    def test_columns_follow_fixed_order(self, engineer, bars):
        ts = engineer.engineer(bars)
        assert ts.columns == FEATURE_COLUMNS
        assert ts.columns[0] == "close_lag_1"
        assert ts.columns[-1] == "cpi"


class TestInferenceRow:
    def test_latest_row_is_anchored_on_last_bar(self, engineer, bars):
        ts = engineer.engineer(bars, horizon=5)
        assert ts.latest_close == pytest.approx(bars[-1].close)
        # close_lag_1 of the last bar is the previous close
        assert ts.latest_features[0] == pytest.approx(bars[-2].close)

    def test_latest_volatility_is_positive(self, engineer, bars):
        ts = engineer.engineer(bars, horizon=5)
        assert ts.latest_volatility > 0


class TestMacroFeatures:
    def test_defaults_when_snapshot_missing(self, engineer, bars):
        ts = engineer.engineer(bars, macro=None)
        assert ts.latest_features[-2] == 4.5
        assert ts.latest_features[-1] == 300.0

    def test_provided_values_are_broadcast(self, engineer, bars):
        ts = engineer.engineer(bars, macro=MacroSnapshot(fed_funds_rate=5.25, cpi=310.2))
        assert (ts.features[:, -2] == 5.25).all()
        assert (ts.features[:, -1] == 310.2).all()

    def test_zero_rate_is_not_replaced_by_default(self, engineer, bars):
        ts = engineer.engineer(bars, macro=MacroSnapshot(fed_funds_rate=0.0, cpi=None))
        assert ts.latest_features[-2] == 0.0
        assert ts.latest_features[-1] == 300.0


class TestFeatureEngineerErrors:
    def test_rejects_non_positive_horizon(self, engineer, bars):
        with pytest.raises(TrainingError):
            engineer.engineer(bars, horizon=0)

    def test_empty_history(self, engineer):
        with pytest.raises(InsufficientDataError):
            engineer.engineer([])

    def test_too_few_rows_after_warmup(self, engineer):
        short = make_bars(stepped_closes(60))
        with pytest.raises(InsufficientDataError) as exc_info:
            engineer.engineer(short, horizon=1)
        assert exc_info.value.available == 10
        assert exc_info.value.required == 30

    def test_custom_minimum(self):
        engineer = FeatureEngineer(FeatureConfig(min_training_samples=5))
        ts = engineer.engineer(make_bars(stepped_closes(60)), horizon=1)
        assert len(ts) == 10


class TestAntiLeakage:
    def test_rows_ignore_later_bars(self, engineer, bars):
        altered = list(bars)
        altered[-1] = replace(altered[-1], close=1_000.0, high=1_000.5, low=999.5)
        base = engineer.engineer(bars, horizon=5)
        changed = engineer.engineer(altered, horizon=5)
        np.testing.assert_allclose(base.features, changed.features)

    def test_split_is_positional(self, engineer, bars):
        ts = engineer.engineer(bars, horizon=5)
        train_x, train_y, test_x, test_y = ts.split(0.8)
        assert len(train_y) == 52
        assert len(test_y) == 14
        np.testing.assert_array_equal(train_x, ts.features[:52])
        np.testing.assert_array_equal(test_y, ts.targets[52:])
