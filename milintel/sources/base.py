"""Shared plumbing for provider clients.

Every client turns a failure into its typed fallback payload; nothing
raised inside ``_fetch`` escapes ``fetch``.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Generic, Optional, TypeVar

import httpx

from ..core.config import Credentials, IntelConfig, get_config
from ..core.logger import get_logger

logger = get_logger(__name__)

P = TypeVar("P")


def describe_error(exc: Exception) -> str:
    """Short human-readable reason for a failed provider call."""
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code} from {exc.request.url.host}"
    if isinstance(exc, httpx.TimeoutException):
        return f"timeout: {type(exc).__name__}"
    if isinstance(exc, httpx.HTTPError):
        return f"network error: {exc}" if str(exc) else f"network error: {type(exc).__name__}"
    if isinstance(exc, ValueError):
        return f"malformed response: {exc}"
    return str(exc) or type(exc).__name__


class SourceClient(Generic[P]):
    """Base class for a single-provider client."""

    name: str = "source"

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        config: Optional[IntelConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.credentials = credentials or Credentials.from_env()
        self.config = config or get_config()
        self._client = client

    @asynccontextmanager
    async def session(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the shared client, or a short-lived one if none was given."""
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=self.config.http_timeout) as client:
                yield client

    async def fetch(self) -> P:
        """Fetch and normalize; returns the fallback payload on any failure."""
        try:
            return await self._fetch()
        except Exception as e:
            reason = describe_error(e)
            logger.warning("source_fetch_failed", source=self.name, error=reason)
            return self.fallback(reason)

    async def _fetch(self) -> P:
        raise NotImplementedError

    def fallback(self, reason: str) -> P:
        raise NotImplementedError
