"""
Tests for the request pacer used by the accuracy validator.
"""

import pytest

from app.shared.pacing import RequestPacer


class TestRequestPacer:
    def test_first_request_is_immediate(self, sleep):
        pacer = RequestPacer(sleep=sleep)
        pacer.wait()
        assert sleep.calls == []
        assert pacer.requests == 1

    def test_spacing_between_requests(self, sleep):
        pacer = RequestPacer(spacing_seconds=1.0, sleep=sleep)
        for _ in range(3):
            pacer.wait()
        assert sleep.calls == [1.0, 1.0]

    def test_cooldown_after_every_nth_success(self, sleep):
        pacer = RequestPacer(
            spacing_seconds=1.0, cooldown_every=5, cooldown_seconds=60.0, sleep=sleep
        )
        for _ in range(6):
            pacer.wait()
            pacer.record_success()
        # four spacings, then a cooldown instead of the fifth spacing
        assert sleep.calls == [1.0, 1.0, 1.0, 1.0, 60.0]
        assert pacer.total_slept == pytest.approx(64.0)

    def test_cooldown_fires_once_per_milestone(self, sleep):
        pacer = RequestPacer(
            spacing_seconds=1.0, cooldown_every=2, cooldown_seconds=30.0, sleep=sleep
        )
        pacer.wait()
        pacer.record_success()
        pacer.wait()
        pacer.record_success()
        # failures after the milestone do not re-trigger the cooldown
        pacer.wait()
        pacer.wait()
        pacer.wait()
        assert sleep.calls == [1.0, 30.0, 1.0, 1.0]
        assert pacer.successes == 2

    def test_failures_do_not_count_towards_cooldown(self, sleep):
        pacer = RequestPacer(spacing_seconds=0.5, cooldown_every=2, sleep=sleep)
        for _ in range(4):
            pacer.wait()
        assert 60.0 not in sleep.calls

    def test_zero_spacing_never_sleeps(self, sleep):
        pacer = RequestPacer(spacing_seconds=0.0, sleep=sleep)
        pacer.wait()
        pacer.wait()
        assert sleep.calls == []

    def test_rejects_invalid_cadence(self):
        with pytest.raises(ValueError):
            RequestPacer(cooldown_every=0)
