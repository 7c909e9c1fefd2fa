"""
Dependency injection for the forecasting bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the forecasting context.
"""

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from app.application.forecasting.forecast_price import ForecastPriceUseCase
from app.application.forecasting.get_accuracy_summary import GetAccuracySummaryUseCase
from app.application.forecasting.get_prediction_history import (
    GetPredictionHistoryUseCase,
)
from app.application.forecasting.validate_predictions import (
    ValidatePredictionsUseCase,
)
from app.core.config import settings
from app.infrastructure.forecasting.fred_macro_adapter import FredMacroAdapter
from app.infrastructure.forecasting.polygon_market_data_adapter import (
    PolygonMarketDataAdapter,
)
from app.infrastructure.forecasting.prediction_repository import (
    PredictionRepositoryAdapter,
)
from prediction.config import ForecastingConfig


@lru_cache
def get_db_engine() -> Engine:
    """Build a SQLAlchemy engine from application settings (once per process)."""
    return create_engine(settings.database_url, pool_pre_ping=True)


@lru_cache
def get_forecasting_config() -> ForecastingConfig:
    """Build the pipeline configuration from application settings."""
    return ForecastingConfig.from_settings(settings)


@lru_cache
def get_market_data_adapter() -> PolygonMarketDataAdapter:
    providers = get_forecasting_config().providers
    return PolygonMarketDataAdapter(
        api_key=providers.polygon_api_key,
        base_url=providers.polygon_base_url,
        timeout=providers.http_timeout_seconds,
    )


@lru_cache
def get_macro_adapter() -> FredMacroAdapter:
    providers = get_forecasting_config().providers
    return FredMacroAdapter(
        api_key=providers.fred_api_key,
        base_url=providers.fred_base_url,
        timeout=providers.http_timeout_seconds,
    )


def get_prediction_repository() -> PredictionRepositoryAdapter:
    return PredictionRepositoryAdapter(engine=get_db_engine())


def get_forecast_price_use_case() -> ForecastPriceUseCase:
    """Build ForecastPriceUseCase with its infrastructure dependencies."""
    return ForecastPriceUseCase(
        history_provider=get_market_data_adapter(),
        macro_provider=get_macro_adapter(),
        repository=get_prediction_repository(),
        cfg=get_forecasting_config(),
    )


def get_validate_predictions_use_case() -> ValidatePredictionsUseCase:
    """Build ValidatePredictionsUseCase with its infrastructure dependencies."""
    return ValidatePredictionsUseCase(
        repository=get_prediction_repository(),
        price_provider=get_market_data_adapter(),
        cfg=get_forecasting_config(),
    )


def get_prediction_history_use_case() -> GetPredictionHistoryUseCase:
    """Build GetPredictionHistoryUseCase with its infrastructure dependencies."""
    return GetPredictionHistoryUseCase(repository=get_prediction_repository())


def get_accuracy_summary_use_case() -> GetAccuracySummaryUseCase:
    """Build GetAccuracySummaryUseCase with its infrastructure dependencies."""
    return GetAccuracySummaryUseCase(repository=get_prediction_repository())
