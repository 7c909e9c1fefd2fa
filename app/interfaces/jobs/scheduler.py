"""
Scheduled accuracy validation.

Uses APScheduler to run the accuracy validator on a cron expression
(default: 22:30 UTC Mon-Fri, after the US close). Each run is one
validation pass; results are kept in a bounded in-memory history.

The job can also be triggered on demand via run_now().
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from app.application.forecasting.validate_predictions import (
    ValidatePredictionsUseCase,
)
from app.domain.forecasting.errors import ForecastingDomainError

logger = logging.getLogger(__name__)

VALIDATION_JOB_ID = "validate_predictions"


class TaskStatus(Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TaskResult:
    """Result of a scheduled task execution."""

    task_name: str
    status: TaskStatus
    started_at: str
    finished_at: str | None = None
    duration_seconds: float = 0.0
    details: dict = field(default_factory=dict)
    error: str | None = None


class ValidationScheduler:
    """Runs the accuracy validator on a cron schedule.

    A fresh use case is built for every run so each pass gets its own
    pacer and a fresh view of the configuration.

    Usage:
        scheduler = ValidationScheduler(get_validate_predictions_use_case, "30 22 * * mon-fri")
        scheduler.start()     # begin the cron job
        scheduler.run_now()   # trigger a pass immediately (blocking)
        scheduler.stop()      # graceful shutdown
    """

    def __init__(
        self,
        use_case_factory: Callable[[], ValidatePredictionsUseCase],
        cron_expression: str,
        max_history: int = 200,
    ) -> None:
        self._use_case_factory = use_case_factory
        self._trigger = CronTrigger.from_crontab(cron_expression, timezone="UTC")
        self._max_history = max_history
        self._task_history: list[TaskResult] = []
        self._lock = threading.Lock()
        self._scheduler: BackgroundScheduler | None = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    @property
    def task_history(self) -> list[TaskResult]:
        with self._lock:
            return list(self._task_history)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background scheduler with the validation job."""
        if self._scheduler is not None:
            logger.warning("Validation scheduler already running.")
            return

        self._scheduler = BackgroundScheduler(
            timezone="UTC",
            job_defaults={"coalesce": True, "max_instances": 1},
        )
        self._scheduler.add_job(
            self.run_now,
            self._trigger,
            id=VALIDATION_JOB_ID,
            name="Prediction accuracy validation",
        )
        self._scheduler.start()
        logger.info("Validation scheduler started (%s).", self._trigger)

    def stop(self) -> None:
        """Gracefully stop the scheduler."""
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Validation scheduler stopped.")

    # ------------------------------------------------------------------
    # Task
    # ------------------------------------------------------------------

    def run_now(self) -> TaskResult:
        """Run one validation pass immediately and record its result."""
        start = time.monotonic()
        started_at = datetime.now(timezone.utc).isoformat()
        try:
            result = self._use_case_factory().execute()
            task_result = TaskResult(
                task_name=VALIDATION_JOB_ID,
                status=TaskStatus.COMPLETED,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc).isoformat(),
                duration_seconds=round(time.monotonic() - start, 2),
                details={
                    "validated": result.validated,
                    "errors": result.errors,
                    "skipped": result.skipped,
                    "total_checked": result.total_checked,
                    "message": result.message,
                },
            )
        except ForecastingDomainError as exc:
            task_result = TaskResult(
                task_name=VALIDATION_JOB_ID,
                status=TaskStatus.FAILED,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc).isoformat(),
                duration_seconds=round(time.monotonic() - start, 2),
                error=exc.message,
            )
            logger.error("Scheduled validation failed: %s", exc.message)
        except Exception as exc:
            task_result = TaskResult(
                task_name=VALIDATION_JOB_ID,
                status=TaskStatus.FAILED,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc).isoformat(),
                duration_seconds=round(time.monotonic() - start, 2),
                error=str(exc),
            )
            logger.exception("Scheduled validation crashed")

        self._record_result(task_result)
        return task_result

    def _record_result(self, result: TaskResult) -> None:
        with self._lock:
            self._task_history.append(result)
            if len(self._task_history) > self._max_history:
                self._task_history = self._task_history[-self._max_history:]
