"""
Use case: List recently stored predictions.

Input: GetPredictionHistoryQuery (ticker, market, limit)
Output: list[PredictionRecordResult]
Side effects: None (read-only).
"""

import logging

from app.application.forecasting.dtos import (
    GetPredictionHistoryQuery,
    PredictionRecordResult,
)
from app.domain.forecasting.ports import PredictionRepository
from app.domain.forecasting.tickers import normalize_ticker, parse_market

logger = logging.getLogger(__name__)


class GetPredictionHistoryUseCase:
    """Returns the newest prediction records, optionally for one ticker."""

    def __init__(self, repository: PredictionRepository) -> None:
        self._repository = repository

    def execute(self, query: GetPredictionHistoryQuery) -> list[PredictionRecordResult]:
        ticker = None
        if query.ticker:
            ticker = normalize_ticker(query.ticker, parse_market(query.market))

        records = self._repository.list_recent(ticker=ticker, limit=query.limit)
        logger.debug("Loaded %d prediction records (ticker=%s).", len(records), ticker)
        return [
            PredictionRecordResult(
                id=r.id,
                ticker=r.ticker,
                market=r.market.value,
                target_date=r.target_date,
                predicted_price=round(r.predicted_price, 2),
                lower_bound=round(r.lower_bound, 2),
                upper_bound=round(r.upper_bound, 2),
                current_price=round(r.current_price, 2),
                days_ahead=r.days_ahead,
                r_squared=round(r.r_squared, 3),
                training_samples=r.training_samples,
                actual_price=None if r.actual_price is None else round(r.actual_price, 2),
                is_accurate=r.is_accurate,
                created_at=r.created_at,
            )
            for r in records
        ]
