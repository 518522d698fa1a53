# market_data.py
# Quote record, offline mock quotes, and historical volatility.
# Fetching live quotes is left to the caller; only the payload is parsed here.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import numpy as np

from .errors import InvalidInputError

__all__ = [
    "Quote",
    "MOCK_QUOTES",
    "get_mock_quote",
    "parse_global_quote",
    "historical_volatility",
]

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = 252
DEFAULT_VOLATILITY = 0.20


@dataclass(frozen=True)
class Quote:
    """Snapshot of one underlying. Only ``price`` feeds the pricing engine."""
    symbol: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    volume: int = 0
    high: Optional[float] = None
    low: Optional[float] = None
    open: Optional[float] = None
    previous_close: Optional[float] = None
    timestamp: str = ""


MOCK_QUOTES: dict[str, Quote] = {
    "AAPL": Quote("AAPL", 175.50, 2.30, 1.33, 45_678_900,
                  176.80, 173.20, 174.00, 173.20, "2024-06-09"),
    "MSFT": Quote("MSFT", 420.15, -3.85, -0.91, 23_456_789,
                  425.00, 418.50, 424.00, 424.00, "2024-06-09"),
    "GOOGL": Quote("GOOGL", 2750.80, 15.60, 0.57, 1_234_567,
                   2760.00, 2735.00, 2740.00, 2735.20, "2024-06-09"),
    "TSLA": Quote("TSLA", 185.25, -8.75, -4.51, 67_890_123,
                  195.00, 183.50, 194.00, 194.00, "2024-06-09"),
    "SPY": Quote("SPY", 525.40, 1.20, 0.23, 89_012_345,
                 526.50, 523.80, 524.20, 524.20, "2024-06-09"),
}


def get_mock_quote(symbol: str) -> Optional[Quote]:
    return MOCK_QUOTES.get(symbol.upper())


def parse_global_quote(payload: Mapping) -> Quote:
    """Convert an Alpha Vantage ``GLOBAL_QUOTE`` JSON body into a :class:`Quote`.

    Raises
    ------
    InvalidInputError
        If the payload carries an error/rate-limit note or no quote.
    """
    for key in ("Error Message", "Note"):
        if payload.get(key):
            raise InvalidInputError(f"quote service error: {payload[key]}")
    q = payload.get("Global Quote")
    if not q:
        raise InvalidInputError("no quote data available")

    try:
        return Quote(
            symbol=q["01. symbol"],
            price=float(q["05. price"]),
            change=float(q["09. change"]),
            change_percent=float(str(q["10. change percent"]).rstrip("%")),
            volume=int(q["06. volume"]),
            high=float(q["03. high"]),
            low=float(q["04. low"]),
            open=float(q["02. open"]),
            previous_close=float(q["08. previous close"]),
            timestamp=q["07. latest trading day"],
        )
    except (KeyError, ValueError) as exc:
        raise InvalidInputError(f"malformed quote payload: {exc}") from exc


def historical_volatility(prices: Sequence[float], period: int = 30) -> float:
    """Annualised close-to-close volatility as a fraction.

    Uses the sample standard deviation of the last ``period`` log returns,
    scaled by sqrt(252). Fewer than two returns gives the 20% default.
    """
    if period < 1:
        raise InvalidInputError(f"period must be >= 1, got {period}")
    px = np.asarray(prices, dtype=float)
    if px.size < 2:
        logger.debug("historical_volatility: %d prices, using default", px.size)
        return DEFAULT_VOLATILITY
    if np.any(px <= 0) or not np.all(np.isfinite(px)):
        raise InvalidInputError("prices must be positive and finite")

    rets = np.diff(np.log(px))[-period:]
    if rets.size < 2:
        return DEFAULT_VOLATILITY
    return float(rets.std(ddof=1) * np.sqrt(TRADING_DAYS_PER_YEAR))
