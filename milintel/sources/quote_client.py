"""Finnhub quote client for defense contractor tickers."""

import asyncio
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel

from ..core.logger import get_logger
from .base import SourceClient, describe_error

logger = get_logger(__name__)


@dataclass
class NormalizedQuote:
    symbol: str
    price: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    observed_at: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class _FinnhubQuote(BaseModel):
    c: Optional[float] = None    # current
    d: Optional[float] = None    # change
    dp: Optional[float] = None   # percent change
    h: Optional[float] = None
    l: Optional[float] = None
    t: Optional[int] = None


class QuoteClient(SourceClient[List[NormalizedQuote]]):
    """One Finnhub ``/quote`` call per symbol."""

    name = "stocks"

    async def quote(self, symbol: str) -> NormalizedQuote:
        """Quote one symbol; a failure becomes ``{symbol, error}``."""
        symbol = symbol.strip().upper()
        try:
            return await self._quote(symbol)
        except Exception as e:
            reason = describe_error(e)
            logger.warning("quote_fetch_failed", symbol=symbol, error=reason)
            return NormalizedQuote(symbol=symbol, error=reason)

    async def quote_all(self, symbols: Optional[List[str]] = None) -> List[NormalizedQuote]:
        """Quote the watch-list concurrently, preserving its order."""
        symbols = symbols if symbols is not None else self.config.watch_symbols
        return list(await asyncio.gather(*(self.quote(s) for s in symbols)))

    async def _quote(self, symbol: str) -> NormalizedQuote:
        if not self.credentials.finnhub_api_key:
            raise RuntimeError("FINNHUB_API_KEY not configured")

        params = {"symbol": symbol, "token": self.credentials.finnhub_api_key}
        async with self.session() as client:
            resp = await client.get(self.config.finnhub_quote_url, params=params)
        resp.raise_for_status()
        q = _FinnhubQuote.model_validate(resp.json())

        # Finnhub answers unknown symbols with an all-zero quote
        if not q.c and not q.h and not q.l:
            raise RuntimeError(f"no quote data for {symbol}")

        return NormalizedQuote(
            symbol=symbol,
            price=q.c,
            change=q.d,
            change_percent=q.dp,
            high=q.h,
            low=q.l,
            observed_at=datetime.now(timezone.utc).isoformat(),
        )

    async def fetch(self) -> List[NormalizedQuote]:
        # quote() already isolates each symbol
        return await self.quote_all()

    def fallback(self, reason: str) -> List[NormalizedQuote]:
        return [NormalizedQuote(symbol=s, error=reason) for s in self.config.watch_symbols]


def usable_change(quote: NormalizedQuote) -> Optional[float]:
    """Percent change of a successful quote, or None if it cannot be used."""
    if not quote.ok or quote.change_percent is None:
        return None
    if not math.isfinite(quote.change_percent):
        return None
    return quote.change_percent
