"""
FastAPI router for the forecasting bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
"""

from fastapi import APIRouter, Depends, Query, Request

from app.application.forecasting.dtos import (
    ForecastPriceCommand,
    GetPredictionHistoryQuery,
)
from app.application.forecasting.forecast_price import ForecastPriceUseCase
from app.application.forecasting.get_accuracy_summary import GetAccuracySummaryUseCase
from app.application.forecasting.get_prediction_history import (
    GetPredictionHistoryUseCase,
)
from app.application.forecasting.validate_predictions import (
    ValidatePredictionsUseCase,
)
from app.interfaces.forecasting.dependencies import (
    get_accuracy_summary_use_case,
    get_forecast_price_use_case,
    get_prediction_history_use_case,
    get_validate_predictions_use_case,
)
from app.interfaces.forecasting.schemas import (
    AccuracySummaryResponse,
    ErrorResponse,
    ForecastRequest,
    ForecastResponse,
    PredictionHistoryResponse,
    PredictionRecordItem,
    ValidationResponse,
)
from app.shared.security.rate_limiting import HEAVY_RATE_LIMIT, limiter

router = APIRouter(prefix="/forecasting", tags=["forecasting"])


@router.post(
    "/predictions",
    response_model=ForecastResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Forecast a closing price",
    description=(
        "Train a linear model on the ticker's recent history and forecast its "
        "close on target_date, with a 2-sigma volatility interval."
    ),
)
@limiter.limit(HEAVY_RATE_LIMIT)
def forecast_price(
    request: Request,
    payload: ForecastRequest,
    use_case: ForecastPriceUseCase = Depends(get_forecast_price_use_case),
) -> ForecastResponse:
    """Forecast the close of a ticker on a future date."""
    command = ForecastPriceCommand(
        ticker=payload.ticker,
        market=payload.market,
        target_date=payload.target_date,
    )
    result = use_case.execute(command)
    return ForecastResponse(
        prediction_id=result.prediction_id,
        ticker=result.ticker,
        market=result.market,
        target_date=result.target_date,
        days_ahead=result.days_ahead,
        current_price=result.current_price,
        predicted_price=result.predicted_price,
        lower_bound=result.lower_bound,
        upper_bound=result.upper_bound,
        currency=result.currency,
        r_squared=result.r_squared,
        mae=result.mae,
        training_samples=result.training_samples,
        volatility=result.volatility,
    )


@router.get(
    "/predictions",
    response_model=PredictionHistoryResponse,
    summary="List stored predictions",
    description="Most recent prediction records, newest first.",
)
def list_predictions(
    ticker: str | None = Query(default=None, max_length=12),
    market: str = Query(default="US"),
    limit: int = Query(default=20, ge=1, le=200),
    use_case: GetPredictionHistoryUseCase = Depends(get_prediction_history_use_case),
) -> PredictionHistoryResponse:
    """List recent predictions, optionally for a single ticker."""
    results = use_case.execute(
        GetPredictionHistoryQuery(ticker=ticker, market=market, limit=limit)
    )
    return PredictionHistoryResponse(
        predictions=[
            PredictionRecordItem(
                id=r.id,
                ticker=r.ticker,
                market=r.market,
                target_date=r.target_date,
                predicted_price=r.predicted_price,
                lower_bound=r.lower_bound,
                upper_bound=r.upper_bound,
                current_price=r.current_price,
                days_ahead=r.days_ahead,
                r_squared=r.r_squared,
                training_samples=r.training_samples,
                actual_price=r.actual_price,
                is_accurate=r.is_accurate,
                created_at=r.created_at,
            )
            for r in results
        ]
    )


@router.get(
    "/accuracy",
    response_model=AccuracySummaryResponse,
    summary="Interval hit rate",
    description="Share of validated predictions whose interval contained the actual close.",
)
def get_accuracy(
    ticker: str | None = Query(default=None, max_length=12),
    market: str = Query(default="US"),
    use_case: GetAccuracySummaryUseCase = Depends(get_accuracy_summary_use_case),
) -> AccuracySummaryResponse:
    """Summarize accuracy over validated predictions."""
    result = use_case.execute(ticker=ticker, market=market)
    return AccuracySummaryResponse(
        ticker=result.ticker,
        validated=result.validated,
        accurate=result.accurate,
        hit_rate=result.hit_rate,
    )


@router.post(
    "/validations",
    response_model=ValidationResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Validate matured predictions",
    description=(
        "Run one accuracy validation pass over predictions whose target date "
        "has passed. Provider calls are paced, so this can take minutes."
    ),
)
@limiter.limit(HEAVY_RATE_LIMIT)
def validate_predictions(
    request: Request,
    use_case: ValidatePredictionsUseCase = Depends(get_validate_predictions_use_case),
) -> ValidationResponse:
    """Reconcile matured predictions against realized closes."""
    result = use_case.execute()
    return ValidationResponse(
        validated=result.validated,
        errors=result.errors,
        total_checked=result.total_checked,
        skipped=result.skipped,
        message=result.message,
    )
