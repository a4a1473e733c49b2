"""Concurrent fan-out to the provider clients.

Each requested source is fetched in parallel and the join waits for all
of them to settle. Clients already convert their own failures into
fallback payloads; anything that still escapes is replaced here with the
source's fallback, so a snapshot always has one entry per requested source.
"""

import asyncio
import time
from typing import Any, Dict, Iterable, Optional, Tuple

import httpx

from .core.config import Credentials, IntelConfig, get_config
from .core.logger import get_logger
from .sources import (
    FlightClient,
    NewsClient,
    QuoteClient,
    SocialClient,
    SourceClient,
    VesselClient,
)

logger = get_logger(__name__)

SourceSnapshot = Dict[str, Any]

MINI_SOURCES: Tuple[str, ...] = ("news", "stocks", "flights")
DEEP_SOURCES: Tuple[str, ...] = ("news", "stocks", "flights", "navy", "social")
ALL_SOURCES = DEEP_SOURCES


class IntelligenceAggregator:
    """
    Owns one client per provider (sharing a single ``httpx.AsyncClient``).

    Usage:
        agg = IntelligenceAggregator(credentials)
        snapshot = await agg.gather(MINI_SOURCES)
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        config: Optional[IntelConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        clients: Optional[Dict[str, SourceClient]] = None,
    ):
        self.config = config or get_config()
        credentials = credentials or Credentials.from_env()
        self._http = http_client
        shared = dict(credentials=credentials, config=self.config, client=http_client)
        self.clients: Dict[str, SourceClient] = {
            "news": NewsClient(**shared),
            "stocks": QuoteClient(**shared),
            "flights": FlightClient(**shared),
            "navy": VesselClient(**shared),
            "social": SocialClient(**shared),
        }
        if clients:
            self.clients.update(clients)

    def client(self, source: str) -> SourceClient:
        try:
            return self.clients[source]
        except KeyError:
            raise ValueError(f"unknown source: {source!r}") from None

    async def gather(self, sources: Iterable[str] = ALL_SOURCES) -> SourceSnapshot:
        """Fetch ``sources`` concurrently and join them into one snapshot."""
        if isinstance(sources, str):
            sources = (sources,)
        names = list(dict.fromkeys(sources))
        clients = [self.client(name) for name in names]

        t0 = time.monotonic()
        results = await asyncio.gather(
            *(c.fetch() for c in clients), return_exceptions=True
        )

        snapshot: SourceSnapshot = {}
        degraded = []
        for name, client, result in zip(names, clients, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.error("source_client_raised", source=name, error=str(result))
                result = client.fallback(str(result) or type(result).__name__)
            if _is_degraded(result):
                degraded.append(name)
            snapshot[name] = result

        logger.info(
            "snapshot_gathered",
            sources=names,
            degraded=degraded,
            elapsed_ms=round((time.monotonic() - t0) * 1000),
        )
        return snapshot

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()


def _is_degraded(payload: Any) -> bool:
    if isinstance(payload, list):
        return bool(payload) and all(getattr(p, "error", None) for p in payload)
    return getattr(payload, "error", None) is not None
