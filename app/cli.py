"""
CLI entry point for PriceCast.

Usage:
    # Create the prediction table
    pricecast init-db

    # Forecast a ticker's close on a future date
    pricecast forecast --ticker AAPL --target-date 2026-11-02
    pricecast forecast --ticker SHOP --market TSX --target-date 2026-11-02

    # Run one accuracy validation pass
    pricecast validate

    # Show the interval hit rate
    pricecast accuracy --ticker AAPL

    # Run the validator on its cron schedule (foreground)
    pricecast scheduler

    # Serve the HTTP API
    pricecast serve --port 8000
"""

import argparse
import logging
import sys
import time
from datetime import date

from app.core.config import settings
from app.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def cmd_init_db(args: argparse.Namespace) -> None:
    """Create the stock_predictions table if missing."""
    from app.infrastructure.forecasting.prediction_repository import ensure_schema
    from app.interfaces.forecasting.dependencies import get_db_engine

    ensure_schema(get_db_engine())
    logger.info("Prediction store ready.")


def cmd_forecast(args: argparse.Namespace) -> None:
    """Run a single forecast and print it."""
    from app.application.forecasting.dtos import ForecastPriceCommand
    from app.interfaces.forecasting.dependencies import get_forecast_price_use_case

    result = get_forecast_price_use_case().execute(
        ForecastPriceCommand(
            ticker=args.ticker,
            market=args.market,
            target_date=args.target_date,
        )
    )
    logger.info(
        "%s | %s | Close=%.2f %s | CI=[%.2f, %.2f] | R²=%.3f | MAE=%.2f | n=%d",
        result.ticker,
        result.target_date,
        result.predicted_price,
        result.currency,
        result.lower_bound,
        result.upper_bound,
        result.r_squared,
        result.mae,
        result.training_samples,
    )


def cmd_validate(args: argparse.Namespace) -> None:
    """Run one accuracy validation pass."""
    from app.interfaces.forecasting.dependencies import (
        get_validate_predictions_use_case,
    )

    result = get_validate_predictions_use_case().execute()
    logger.info(
        "%s: validated=%d errors=%d skipped=%d checked=%d",
        result.message,
        result.validated,
        result.errors,
        result.skipped,
        result.total_checked,
    )


def cmd_accuracy(args: argparse.Namespace) -> None:
    """Print the hit rate over validated predictions."""
    from app.interfaces.forecasting.dependencies import get_accuracy_summary_use_case

    result = get_accuracy_summary_use_case().execute(
        ticker=args.ticker, market=args.market
    )
    logger.info(
        "%s | validated=%d accurate=%d hit_rate=%.2f%%",
        result.ticker or "ALL",
        result.validated,
        result.accurate,
        result.hit_rate * 100,
    )


def cmd_scheduler(args: argparse.Namespace) -> None:
    """Run the validation scheduler in the foreground."""
    from app.interfaces.forecasting.dependencies import (
        get_validate_predictions_use_case,
    )
    from app.interfaces.jobs.scheduler import ValidationScheduler

    scheduler = ValidationScheduler(
        get_validate_predictions_use_case, args.cron or settings.validator_cron
    )
    scheduler.start()
    logger.info("Scheduler running. Press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down scheduler...")
    finally:
        scheduler.stop()


def cmd_serve(args: argparse.Namespace) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    logger.info("Starting API at http://%s:%d", args.host, args.port)
    uvicorn.run("app.main:app", host=args.host, port=args.port, reload=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PriceCast stock forecasting CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create the prediction table")
    init_parser.set_defaults(func=cmd_init_db)

    forecast_parser = subparsers.add_parser("forecast", help="Forecast a closing price")
    forecast_parser.add_argument("--ticker", required=True, help="Ticker symbol")
    forecast_parser.add_argument(
        "--market", default="US", choices=["US", "TSX"], help="Listing market"
    )
    forecast_parser.add_argument(
        "--target-date",
        required=True,
        dest="target_date",
        type=date.fromisoformat,
        help="Forecast date (YYYY-MM-DD), after today",
    )
    forecast_parser.set_defaults(func=cmd_forecast)

    validate_parser = subparsers.add_parser(
        "validate", help="Validate matured predictions against actual closes"
    )
    validate_parser.set_defaults(func=cmd_validate)

    accuracy_parser = subparsers.add_parser("accuracy", help="Show interval hit rate")
    accuracy_parser.add_argument("--ticker", default=None, help="Limit to one ticker")
    accuracy_parser.add_argument(
        "--market", default="US", choices=["US", "TSX"], help="Listing market"
    )
    accuracy_parser.set_defaults(func=cmd_accuracy)

    sched_parser = subparsers.add_parser(
        "scheduler", help="Run the accuracy validator on its cron schedule"
    )
    sched_parser.add_argument(
        "--cron", default=None, help="Crontab expression (UTC); defaults to settings"
    )
    sched_parser.set_defaults(func=cmd_scheduler)

    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    from app.domain.forecasting.errors import ForecastingDomainError

    configure_logging(level=settings.log_level)
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except ForecastingDomainError as exc:
        logger.error("%s: %s", type(exc).__name__, exc.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
