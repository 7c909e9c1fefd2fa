"""
Ticker normalization rules.

Tickers are uppercased and trimmed. TSX listings carry the ".TO"
suffix expected by the market-data provider.
"""

from app.domain.forecasting.entities import Market
from app.domain.forecasting.errors import InvalidRequestError

TSX_SUFFIX = ".TO"


def parse_market(value: str | Market) -> Market:
    """Return the Market for a raw value, defaulting casing to upper."""
    if isinstance(value, Market):
        return value
    try:
        return Market(str(value).strip().upper())
    except ValueError:
        raise InvalidRequestError(f"unsupported market '{value}'") from None


def normalize_ticker(ticker: str, market: Market) -> str:
    """Uppercase and trim a ticker, appending the market suffix for TSX.

    >>> normalize_ticker(" shop ", Market.TSX)
    'SHOP.TO'
    """
    clean = ticker.strip().upper()
    if not clean:
        raise InvalidRequestError("ticker is empty")
    if market is Market.TSX and not clean.endswith(TSX_SUFFIX):
        return f"{clean}{TSX_SUFFIX}"
    return clean
