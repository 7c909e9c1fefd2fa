"""
Domain-specific errors for the forecasting bounded context.

All errors raised from the domain layer and the numeric pipeline
must be defined here. These are mapped to HTTP responses at the
interface layer. No framework imports allowed.
"""


class ForecastingDomainError(Exception):
    """Base error for all forecasting domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class InvalidRequestError(ForecastingDomainError):
    """Raised when a forecast request is missing fields or targets a non-future date."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid forecast request: {reason}")
        self.reason = reason


class InsufficientDataError(ForecastingDomainError):
    """Raised when there is too little history to train on."""

    def __init__(self, required: int, available: int, what: str = "rows") -> None:
        super().__init__(
            f"Insufficient data: need at least {required} {what}, got {available}"
        )
        self.required = required
        self.available = available
        self.what = what


class TrainingError(ForecastingDomainError):
    """Raised when the feature matrix or targets are malformed."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Training failed: {reason}")
        self.reason = reason


class UpstreamFetchError(ForecastingDomainError):
    """Raised when an external data provider fails."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"{provider} request failed: {reason}")
        self.provider = provider
        self.reason = reason


class PersistenceError(ForecastingDomainError):
    """Raised when the prediction store cannot be read or written."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Prediction store {operation} failed: {reason}")
        self.operation = operation
        self.reason = reason
