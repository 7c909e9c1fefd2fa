"""
Tests for the ValidatePredictionsUseCase.

Covers outcome classification, error isolation, record claiming,
pacing and the per-fetch timeout.
"""

import threading
from datetime import timedelta

import httpx
import pytest

from app.application.forecasting.validate_predictions import (
    NOTHING_PENDING_MESSAGE,
    ValidatePredictionsUseCase,
)
from app.domain.forecasting.errors import PersistenceError, UpstreamFetchError
from app.domain.forecasting.ports import RealizedPriceProvider
from app.infrastructure.forecasting.polygon_market_data_adapter import (
    PolygonMarketDataAdapter,
)
from app.shared.pacing import RequestPacer
from conftest import (
    TODAY,
    FakeRealizedPrices,
    InMemoryPredictionRepository,
    make_record,
)
from prediction.config import ForecastingConfig, ValidatorConfig

YESTERDAY = TODAY - timedelta(days=1)


def build_use_case(repository, prices, sleep, cfg=None):
    cfg = cfg or ForecastingConfig()
    pacer = RequestPacer(
        spacing_seconds=cfg.validator.request_spacing_seconds,
        cooldown_every=cfg.validator.cooldown_every,
        cooldown_seconds=cfg.validator.cooldown_seconds,
        sleep=sleep,
    )
    return ValidatePredictionsUseCase(
        repository=repository,
        price_provider=prices,
        cfg=cfg,
        pacer=pacer,
        today=lambda: TODAY,
    )


class TestValidationOutcomes:
    def test_nothing_pending(self, repository, sleep):
        result = build_use_case(repository, FakeRealizedPrices(), sleep).execute()
        assert result.validated == 0
        assert result.errors == 0
        assert result.total_checked == 0
        assert result.message == NOTHING_PENDING_MESSAGE

    def test_actual_inside_band_is_accurate(self, sleep):
        record = make_record(ticker="MSFT", lower_bound=95.0, upper_bound=115.0)
        repository = InMemoryPredictionRepository([record])
        prices = FakeRealizedPrices({("MSFT", YESTERDAY): 112.0})

        result = build_use_case(repository, prices, sleep).execute()

        assert result.validated == 1
        assert result.errors == 0
        stored = repository.records[record.id]
        assert stored.actual_price == 112.0
        assert stored.is_accurate is True

    def test_actual_outside_band_is_inaccurate(self, sleep):
        record = make_record(ticker="MSFT", lower_bound=95.0, upper_bound=115.0)
        repository = InMemoryPredictionRepository([record])
        prices = FakeRealizedPrices({("MSFT", YESTERDAY): 120.0})

        result = build_use_case(repository, prices, sleep).execute()

        assert result.validated == 1
        assert repository.records[record.id].is_accurate is False

    def test_actual_on_bound_is_accurate(self, sleep):
        record = make_record(lower_bound=95.0, upper_bound=115.0)
        repository = InMemoryPredictionRepository([record])
        prices = FakeRealizedPrices({("AAPL", YESTERDAY): 95.0})

        build_use_case(repository, prices, sleep).execute()

        assert repository.records[record.id].is_accurate is True

    def test_future_records_are_not_touched(self, sleep):
        future = make_record(target_date=TODAY + timedelta(days=3))
        repository = InMemoryPredictionRepository([future])
        prices = FakeRealizedPrices()

        result = build_use_case(repository, prices, sleep).execute()

        assert result.total_checked == 0
        assert prices.calls == []


class TestValidationErrors:
    def test_missing_price_counts_as_error(self, sleep):
        record = make_record()
        repository = InMemoryPredictionRepository([record])

        result = build_use_case(repository, FakeRealizedPrices(), sleep).execute()

        assert result.validated == 0
        assert result.errors == 1
        assert repository.records[record.id].actual_price is None

    def test_failure_does_not_abort_batch(self, sleep):
        first = make_record(ticker="AAA", target_date=YESTERDAY - timedelta(days=1))
        second = make_record(ticker="BBB", target_date=YESTERDAY)
        repository = InMemoryPredictionRepository([first, second])
        prices = FakeRealizedPrices(
            {
                ("AAA", first.target_date): UpstreamFetchError("Polygon", "HTTP 500"),
                ("BBB", YESTERDAY): 100.0,
            }
        )

        result = build_use_case(repository, prices, sleep).execute()

        assert result.validated == 1
        assert result.errors == 1
        assert result.total_checked == 2
        assert repository.records[first.id].actual_price is None
        assert repository.records[second.id].actual_price == 100.0

    def test_store_failure_counts_as_error(self, sleep):
        record = make_record()
        repository = InMemoryPredictionRepository([record])
        repository.fail_on_outcome = PersistenceError("update outcome", "OperationalError")
        prices = FakeRealizedPrices({("AAPL", YESTERDAY): 100.0})

        result = build_use_case(repository, prices, sleep).execute()

        assert result.validated == 0
        assert result.errors == 1

    def test_lost_claim_is_skipped(self, sleep):
        record = make_record()
        prices = FakeRealizedPrices({("AAPL", YESTERDAY): 100.0})

        class RacingRepository(InMemoryPredictionRepository):
            def record_outcome(self, record_id, actual_price, is_accurate):
                return False

        racing = RacingRepository([record])
        result = build_use_case(racing, prices, sleep).execute()

        assert result.validated == 0
        assert result.errors == 0
        assert result.skipped == 1

    def test_stuck_fetch_times_out(self, sleep):
        release = threading.Event()

        class StuckPrices(RealizedPriceProvider):
            def get_close(self, ticker, on):
                release.wait(5)
                return 100.0

        record = make_record()
        repository = InMemoryPredictionRepository([record])
        cfg = ForecastingConfig(validator=ValidatorConfig(fetch_timeout_seconds=0.05))
        try:
            result = build_use_case(repository, StuckPrices(), sleep, cfg=cfg).execute()
        finally:
            release.set()

        assert result.errors == 1
        assert repository.records[record.id].actual_price is None

    def test_timed_out_fetch_runs_on_daemon_thread(self, sleep):
        release = threading.Event()
        workers = []

        class StuckPrices(RealizedPriceProvider):
            def get_close(self, ticker, on):
                workers.append(threading.current_thread())
                release.wait(5)
                return 100.0

        repository = InMemoryPredictionRepository([make_record()])
        cfg = ForecastingConfig(validator=ValidatorConfig(fetch_timeout_seconds=0.05))
        try:
            build_use_case(repository, StuckPrices(), sleep, cfg=cfg).execute()
        finally:
            release.set()

        assert len(workers) == 1
        assert workers[0].daemon

    def test_unexpected_provider_error_does_not_abort_batch(self, sleep):
        first = make_record(ticker="AAA", target_date=YESTERDAY - timedelta(days=1))
        second = make_record(ticker="BBB", target_date=YESTERDAY)
        repository = InMemoryPredictionRepository([first, second])
        prices = FakeRealizedPrices(
            {
                ("AAA", first.target_date): RuntimeError("provider bug"),
                ("BBB", YESTERDAY): 100.0,
            }
        )

        result = build_use_case(repository, prices, sleep).execute()

        assert result.validated == 1
        assert result.errors == 1
        assert repository.records[first.id].actual_price is None
        assert repository.records[second.id].actual_price == 100.0

    def test_malformed_polygon_close_does_not_abort_batch(self, sleep):
        bad = make_record(ticker="BAD", target_date=YESTERDAY - timedelta(days=1))
        good = make_record(ticker="GOOD", target_date=YESTERDAY)
        repository = InMemoryPredictionRepository([bad, good])

        def handler(request: httpx.Request) -> httpx.Response:
            if "/BAD/" in request.url.path:
                return httpx.Response(200, json={"status": "OK", "close": "N/A"})
            return httpx.Response(200, json={"status": "OK", "close": 100.0})

        client = httpx.Client(
            transport=httpx.MockTransport(handler), base_url="https://api.polygon.io"
        )
        prices = PolygonMarketDataAdapter(api_key="test-key", client=client)

        result = build_use_case(repository, prices, sleep).execute()

        assert result.validated == 1
        assert result.errors == 1
        assert repository.records[bad.id].actual_price is None
        assert repository.records[good.id].actual_price == 100.0


class TestValidationBatching:
    def test_rerun_skips_validated_records(self, sleep):
        record = make_record()
        repository = InMemoryPredictionRepository([record])
        prices = FakeRealizedPrices({("AAPL", YESTERDAY): 100.0})

        build_use_case(repository, prices, sleep).execute()
        second = build_use_case(repository, prices, sleep).execute()

        assert second.total_checked == 0
        assert len(prices.calls) == 1

    def test_batch_size_limits_records(self, sleep):
        records = [
            make_record(ticker=f"T{i}", target_date=YESTERDAY - timedelta(days=i))
            for i in range(5)
        ]
        repository = InMemoryPredictionRepository(records)
        prices = FakeRealizedPrices(
            {(r.ticker, r.target_date): 100.0 for r in records}
        )
        cfg = ForecastingConfig(validator=ValidatorConfig(batch_size=3))

        result = build_use_case(repository, prices, sleep, cfg=cfg).execute()

        assert result.total_checked == 3
        assert result.validated == 3
        # oldest targets are validated first
        assert {call[0] for call in prices.calls} == {"T4", "T3", "T2"}

    @pytest.mark.parametrize("count, expected_cooldowns", [(5, 0), (6, 1), (11, 2)])
    def test_cooldown_after_every_fifth_validation(self, sleep, count, expected_cooldowns):
        records = [
            make_record(ticker=f"T{i}", target_date=YESTERDAY - timedelta(days=i))
            for i in range(count)
        ]
        repository = InMemoryPredictionRepository(records)
        prices = FakeRealizedPrices(
            {(r.ticker, r.target_date): 100.0 for r in records}
        )

        build_use_case(repository, prices, sleep).execute()

        assert sleep.calls.count(60.0) == expected_cooldowns
        assert sleep.calls.count(1.0) == count - 1 - expected_cooldowns
