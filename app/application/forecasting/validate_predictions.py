"""
Use case: Reconcile matured predictions against realized prices.

Input: None (uses "today").
Output: ValidatePredictionsResult
Side effects: Writes actual_price / is_accurate on each reconciled record.

Records are processed one at a time to honor provider rate limits.
A failed fetch or update is counted and skipped; the batch never aborts.
Unresolved records stay eligible for the next run.
"""

import logging
import threading
from datetime import date
from typing import Callable, Optional

from app.application.forecasting.dtos import ValidatePredictionsResult
from app.application.forecasting.forecast_price import utc_today
from app.domain.forecasting.entities import PredictionRecord
from app.domain.forecasting.errors import (
    PersistenceError,
    UpstreamFetchError,
)
from app.domain.forecasting.ports import PredictionRepository, RealizedPriceProvider
from app.shared.pacing import RequestPacer
from prediction.config import ForecastingConfig, config

logger = logging.getLogger(__name__)

NOTHING_PENDING_MESSAGE = "No predictions to validate"


class ValidatePredictionsUseCase:
    """Runs one validation pass over at most `batch_size` matured records."""

    def __init__(
        self,
        repository: PredictionRepository,
        price_provider: RealizedPriceProvider,
        cfg: ForecastingConfig | None = None,
        pacer: RequestPacer | None = None,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self._repository = repository
        self._price_provider = price_provider
        self._cfg = (cfg or config).validator
        self._pacer = pacer
        self._today = today

    def execute(self) -> ValidatePredictionsResult:
        """Run the validation pass.

        Returns:
            Counts of validated, errored, skipped and checked records.

        Raises:
            PersistenceError: If the pending records cannot be read at all.
        """
        today = self._today()
        pending = self._repository.get_pending(as_of=today, limit=self._cfg.batch_size)
        if not pending:
            logger.info("No matured predictions awaiting validation.")
            return ValidatePredictionsResult(
                validated=0, errors=0, total_checked=0, message=NOTHING_PENDING_MESSAGE
            )

        pacer = self._pacer or RequestPacer(
            spacing_seconds=self._cfg.request_spacing_seconds,
            cooldown_every=self._cfg.cooldown_every,
            cooldown_seconds=self._cfg.cooldown_seconds,
        )

        validated = errors = skipped = 0
        for record in pending:
            if record.target_date > today or record.is_validated:
                # the store should never return these
                skipped += 1
                continue

            pacer.wait()
            actual_price = self._fetch_actual_price(record)
            if actual_price is None:
                errors += 1
                continue

            is_accurate = record.brackets(actual_price)
            try:
                claimed = self._repository.record_outcome(
                    record.id, actual_price, is_accurate
                )
            except PersistenceError as exc:
                logger.warning("Could not store outcome for %s: %s", record.id, exc.message)
                errors += 1
                continue

            if not claimed:
                logger.info("Prediction %s was already validated by another run.", record.id)
                skipped += 1
                continue

            validated += 1
            pacer.record_success()
            logger.debug(
                "Validated %s %s on %s: actual=%.2f in [%.2f, %.2f] -> %s",
                record.id,
                record.ticker,
                record.target_date,
                actual_price,
                record.lower_bound,
                record.upper_bound,
                is_accurate,
            )

        result = ValidatePredictionsResult(
            validated=validated,
            errors=errors,
            total_checked=len(pending),
            skipped=skipped,
        )
        logger.info(
            "Validation pass complete: %d validated, %d errors, %d skipped of %d checked.",
            result.validated,
            result.errors,
            result.skipped,
            result.total_checked,
        )
        return result

    def _fetch_actual_price(self, record: PredictionRecord) -> Optional[float]:
        """Fetch the realized close, bounded by the configured timeout.

        Returns None on any provider failure, missing data or timeout.
        """
        timeout = self._cfg.fetch_timeout_seconds
        outcome: dict = {}

        def fetch() -> None:
            try:
                outcome["price"] = self._price_provider.get_close(
                    record.ticker, record.target_date
                )
            except Exception as exc:
                outcome["error"] = exc

        # daemon, so an abandoned fetch never holds up interpreter exit
        worker = threading.Thread(
            target=fetch, name=f"realized-price-{record.id}", daemon=True
        )
        worker.start()
        worker.join(timeout)

        if worker.is_alive():
            logger.warning(
                "Realized price fetch for %s on %s timed out after %.1fs.",
                record.ticker,
                record.target_date,
                timeout,
            )
            return None

        error = outcome.get("error")
        if isinstance(error, UpstreamFetchError):
            logger.warning(
                "Realized price fetch for %s on %s failed: %s",
                record.ticker,
                record.target_date,
                error.message,
            )
            return None
        if error is not None:
            logger.error(
                "Unexpected error fetching realized price for %s on %s.",
                record.ticker,
                record.target_date,
                exc_info=error,
            )
            return None

        price = outcome.get("price")
        if price is None:
            logger.warning("No realized price for %s on %s.", record.ticker, record.target_date)
        return price
