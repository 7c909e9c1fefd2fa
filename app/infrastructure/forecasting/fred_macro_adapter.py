"""
Adapter: FRED macroeconomic data.

Implements MacroDataProvider with the latest Fed Funds rate (FEDFUNDS)
and CPI (CPIAUCSL) observations. Never raises: a missing key, a failed
request or an empty series yields a None reading and the feature
pipeline substitutes its defaults.
"""

import logging
from typing import Optional

import httpx

from app.domain.forecasting.entities import MacroSnapshot
from app.domain.forecasting.ports import MacroDataProvider

logger = logging.getLogger(__name__)

FED_FUNDS_SERIES = "FEDFUNDS"
CPI_SERIES = "CPIAUCSL"
# FRED marks missing observations with "."
MISSING_VALUE = "."


class FredMacroAdapter(MacroDataProvider):
    """Reads the latest macro readings from the St. Louis Fed API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.stlouisfed.org",
        timeout: float = 15.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._api_key = api_key
        self._client = client or httpx.Client(
            base_url=base_url, timeout=httpx.Timeout(timeout)
        )

    def close(self) -> None:
        self._client.close()

    def get_latest(self) -> MacroSnapshot:
        if not self._api_key:
            logger.info("FRED API key not configured; macro defaults will be used.")
            return MacroSnapshot()
        return MacroSnapshot(
            fed_funds_rate=self._latest_value(FED_FUNDS_SERIES),
            cpi=self._latest_value(CPI_SERIES),
        )

    def _latest_value(self, series_id: str) -> Optional[float]:
        """Return the most recent numeric observation of a series, or None."""
        params = {
            "series_id": series_id,
            "api_key": self._api_key,
            "file_type": "json",
            "sort_order": "desc",
            "limit": 5,
        }
        try:
            response = self._client.get("/fred/series/observations", params=params)
            response.raise_for_status()
            data = response.json() or {}
        except httpx.HTTPError as exc:
            logger.warning("FRED %s request failed: %s", series_id, type(exc).__name__)
            return None
        except ValueError:
            logger.warning("FRED %s returned invalid JSON.", series_id)
            return None

        for observation in data.get("observations") or []:
            raw = str(observation.get("value") or "").strip()
            if not raw or raw == MISSING_VALUE:
                continue
            try:
                return float(raw)
            except ValueError:
                continue

        logger.warning("FRED %s has no usable observation.", series_id)
        return None
