"""
Use case: Summarize how often published intervals bracketed the outcome.

Input: ticker (optional) and market
Output: AccuracySummaryResult
Side effects: None (read-only).
"""

from typing import Optional

from app.application.forecasting.dtos import AccuracySummaryResult
from app.domain.forecasting.ports import PredictionRepository
from app.domain.forecasting.tickers import normalize_ticker, parse_market


class GetAccuracySummaryUseCase:
    """Reports the hit rate over validated predictions."""

    def __init__(self, repository: PredictionRepository) -> None:
        self._repository = repository

    def execute(self, ticker: Optional[str] = None, market: str = "US") -> AccuracySummaryResult:
        normalized = normalize_ticker(ticker, parse_market(market)) if ticker else None
        summary = self._repository.summarize_accuracy(ticker=normalized)
        return AccuracySummaryResult(
            ticker=summary.ticker,
            validated=summary.validated,
            accurate=summary.accurate,
            hit_rate=round(summary.hit_rate, 4),
        )
