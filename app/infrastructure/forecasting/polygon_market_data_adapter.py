"""
Adapter: Polygon.io market data.

Implements PriceHistoryProvider (daily aggregates) and
RealizedPriceProvider (daily open/close) over Polygon's REST API.
Transport and provider failures surface as UpstreamFetchError.
Error messages never include request URLs, which carry the API key.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

import httpx

from app.domain.forecasting.entities import DailyBar
from app.domain.forecasting.errors import UpstreamFetchError
from app.domain.forecasting.ports import PriceHistoryProvider, RealizedPriceProvider

logger = logging.getLogger(__name__)

PROVIDER = "Polygon"
OK_STATUSES = {"OK", "DELAYED"}
HTTP_404 = 404


class PolygonMarketDataAdapter(PriceHistoryProvider, RealizedPriceProvider):
    """Fetches daily bars and realized closes from Polygon.io."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.polygon.io",
        timeout: float = 15.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._api_key = api_key
        self._client = client or httpx.Client(
            base_url=base_url, timeout=httpx.Timeout(timeout)
        )

    def close(self) -> None:
        self._client.close()

    def get_daily_bars(self, ticker: str, start: date, end: date) -> list[DailyBar]:
        """Return adjusted daily bars for a ticker, oldest first.

        Args:
            ticker: Normalized ticker (e.g. "AAPL", "SHOP.TO").
            start: First day of the range (inclusive).
            end: Last day of the range (inclusive).

        Raises:
            UpstreamFetchError: On transport errors, a non-OK status or no results.
        """
        self._require_key()
        path = f"/v2/aggs/ticker/{ticker}/range/1/day/{start.isoformat()}/{end.isoformat()}"
        params = {
            "adjusted": "true",
            "sort": "asc",
            "limit": 50000,
            "apiKey": self._api_key,
        }
        payload = self._get_json(path, params)

        status = str(payload.get("status", "")).upper()
        if status not in OK_STATUSES:
            raise UpstreamFetchError(
                PROVIDER, str(payload.get("error") or status or "unknown status")
            )

        results = payload.get("results") or []
        if not results:
            raise UpstreamFetchError(PROVIDER, f"no data returned for {ticker}")

        try:
            bars = [
                DailyBar(
                    date=datetime.fromtimestamp(item["t"] / 1000, tz=timezone.utc).date(),
                    open=float(item["o"]),
                    high=float(item["h"]),
                    low=float(item["l"]),
                    close=float(item["c"]),
                    volume=float(item.get("v") or 0.0),
                )
                for item in results
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamFetchError(PROVIDER, f"malformed aggregate: {exc!r}") from exc

        logger.info("Fetched %d daily bars for %s from %s to %s.", len(bars), ticker, start, end)
        return bars

    def get_close(self, ticker: str, on: date) -> Optional[float]:
        """Return the adjusted close for (ticker, day), or None when Polygon has no data.

        Raises:
            UpstreamFetchError: On transport errors, server-side failures or a
                malformed payload.
        """
        self._require_key()
        path = f"/v1/open-close/{ticker}/{on.isoformat()}"
        try:
            response = self._client.get(
                path, params={"adjusted": "true", "apiKey": self._api_key}
            )
        except httpx.HTTPError as exc:
            raise UpstreamFetchError(PROVIDER, type(exc).__name__) from exc

        if response.status_code == HTTP_404:
            return None
        if response.is_error:
            raise UpstreamFetchError(PROVIDER, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamFetchError(PROVIDER, "invalid JSON body") from exc

        try:
            status = str(payload.get("status", "")).upper()
            if status not in OK_STATUSES:
                logger.debug("No open/close for %s on %s: %s", ticker, on, status)
                return None
            close = payload.get("close")
            if close is None:
                return None
            return float(close)
        except (AttributeError, TypeError, ValueError) as exc:
            raise UpstreamFetchError(PROVIDER, "malformed open/close") from exc

    def _require_key(self) -> None:
        if not self._api_key:
            raise UpstreamFetchError(PROVIDER, "API key not configured")

    def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamFetchError(PROVIDER, type(exc).__name__) from exc
        if response.is_error:
            raise UpstreamFetchError(PROVIDER, f"HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamFetchError(PROVIDER, "invalid JSON body") from exc
