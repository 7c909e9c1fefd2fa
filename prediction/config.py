"""
Prediction module configuration.

Pipeline constants (indicator periods, warm-up window, split ratio,
validator pacing) live here as frozen dataclasses. Provider endpoints
and keys come from the app's central Settings object (app.core.config),
which loads from .env.

ForecastingConfig is the single object injected into the forecast and
validation use cases.
"""

from dataclasses import dataclass, field

FEATURE_COLUMNS: tuple[str, ...] = (
    "close_lag_1",
    "sma_20",
    "sma_50",
    "rsi_14",
    "atr_14",
    "volatility_20",
    "volume_ratio",
    "fed_funds_rate",
    "cpi",
)


@dataclass(frozen=True)
class FeatureConfig:
    """Feature engineering parameters."""

    sma_short_window: int = 20
    sma_long_window: int = 50
    rsi_window: int = 14
    atr_window: int = 14
    volatility_window: int = 20
    volume_sma_window: int = 20

    # Rows anchored before this many bars are skipped, never padded
    warmup_window: int = 50
    min_training_samples: int = 30

    # Substituted when the macro provider has no reading
    default_fed_funds_rate: float = 4.5
    default_cpi: float = 300.0


@dataclass(frozen=True)
class ModelConfig:
    """Training and forecasting settings."""

    train_ratio: float = 0.8
    min_history_bars: int = 100
    # processed rows must cover the horizon plus this margin
    horizon_margin_rows: int = 30
    confidence_z: float = 2.0
    history_lookback_days: int = 730


@dataclass(frozen=True)
class ValidatorConfig:
    """Accuracy validation batch settings.

    Defaults follow the Polygon free tier (5 calls per minute).
    """

    batch_size: int = 50
    request_spacing_seconds: float = 1.0
    cooldown_every: int = 5
    cooldown_seconds: float = 60.0
    fetch_timeout_seconds: float = 30.0


@dataclass(frozen=True)
class ProviderConfig:
    """External data provider endpoints and credentials."""

    polygon_base_url: str = "https://api.polygon.io"
    polygon_api_key: str = ""
    fred_base_url: str = "https://api.stlouisfed.org"
    fred_api_key: str = ""
    http_timeout_seconds: float = 15.0


@dataclass(frozen=True)
class ForecastingConfig:
    """Top-level configuration aggregating all sub-configs."""

    providers: ProviderConfig = field(default_factory=ProviderConfig)
    features: FeatureConfig = field(default_factory=FeatureConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    validator: ValidatorConfig = field(default_factory=ValidatorConfig)

    @classmethod
    def from_settings(cls, settings) -> "ForecastingConfig":
        """Build the configuration from the app's Settings object."""
        return cls(
            providers=ProviderConfig(
                polygon_base_url=settings.polygon_base_url,
                polygon_api_key=settings.polygon_api_key,
                fred_base_url=settings.fred_base_url,
                fred_api_key=settings.fred_api_key,
                http_timeout_seconds=settings.http_timeout_seconds,
            ),
            features=FeatureConfig(
                warmup_window=settings.warmup_window,
                min_training_samples=settings.min_training_samples,
            ),
            model=ModelConfig(
                train_ratio=settings.train_ratio,
                min_history_bars=settings.min_history_bars,
                history_lookback_days=settings.history_lookback_days,
            ),
            validator=ValidatorConfig(
                batch_size=settings.validator_batch_size,
                request_spacing_seconds=settings.validator_request_spacing_seconds,
                cooldown_every=settings.validator_cooldown_every,
                cooldown_seconds=settings.validator_cooldown_seconds,
                fetch_timeout_seconds=settings.validator_fetch_timeout_seconds,
            ),
        )


# Defaults used when nothing is injected
config = ForecastingConfig()
