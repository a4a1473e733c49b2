"""Pytest configuration and shared fixtures."""
import asyncio
import os
import sys
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

# Add the parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from milintel.aggregator import IntelligenceAggregator
from milintel.core.config import Credentials, IntelConfig


NEWS_BODY = {
    "status": "ok",
    "totalResults": 3,
    "articles": [
        {
            "title": "Troops deployment reported near border",
            "description": "Satellite imagery shows new positions.",
            "url": "https://example.com/news/1",
            "publishedAt": "2026-10-18T09:00:00Z",
            "source": {"id": None, "name": "Reuters"},
        },
        {
            "title": "Defense budget talks resume",
            "description": None,
            "url": "https://example.com/news/2",
            "publishedAt": "2026-10-18T12:30:00Z",
            "source": {"id": None, "name": "AP"},
        },
        {
            "title": "Airstrike hits depot, officials say",
            "description": "",
            "url": "https://example.com/news/3",
            "publishedAt": "2026-10-18T11:15:00Z",
            "source": {"name": "BBC News"},
        },
    ],
}

STATES_BODY = {
    "time": 1760788800,
    "states": [
        ["ae1234", "RCH123  ", "United States", 1760788790, 1760788795,
         -77.03, 38.89, 9144.0, False, 231.5, 90.0, 0.0, None, 9200.0, None, False, 0],
        ["a1b2c3", "UAL1    ", "United States", 1760788790, 1760788795,
         -87.9, 41.9, 10000.0, False, 240.0, 180.0, 0.0, None, 10050.0, None, False, 0],
        ["15f0aa", None, "United States", 1760788780],
        ["3c6444", "DLH400  ", "Germany", 1760788790, 1760788795,
         8.5, 50.0, 11000.0, False, 250.0, 270.0, 0.0, None, 11100.0, None, False, 0],
    ],
}

TOKEN_BODY = {"access_token": "reddit-token", "token_type": "bearer", "expires_in": 86400}

LISTING_BODY = {
    "kind": "Listing",
    "data": {
        "children": [
            {
                "kind": "t3",
                "data": {
                    "title": "Carrier group moves into the region",
                    "score": 1520,
                    "num_comments": 312,
                    "subreddit": "worldnews",
                    "created_utc": 1760787000.0,
                    "url": "https://example.com/carrier",
                },
            },
            {
                "kind": "t3",
                "data": {
                    "title": "Analysis: troop rotations this month",
                    "score": 88,
                    "num_comments": 14,
                    "subreddit": "geopolitics",
                    "created_utc": 1760786000.0,
                    "url": "https://example.com/rotations",
                },
            },
        ]
    },
}


def quote_body(symbol: str) -> Dict[str, Any]:
    """Deterministic per-symbol Finnhub quote."""
    base = 100.0 + len(symbol)
    return {"c": base, "d": 1.5, "dp": 1.0, "h": base + 2, "l": base - 2, "o": base - 1, "pc": base - 1.5, "t": 1760788800}


Responder = Callable[[httpx.Request], httpx.Response]


class ProviderStub:
    """httpx.MockTransport handler routing by provider host."""

    def __init__(self):
        self.calls: List[httpx.Request] = []
        self.responders: Dict[str, Responder] = {
            "news": lambda req: httpx.Response(200, json=NEWS_BODY),
            "quote": lambda req: httpx.Response(200, json=quote_body(req.url.params["symbol"])),
            "flights": lambda req: httpx.Response(200, json=STATES_BODY),
            "reddit_token": lambda req: httpx.Response(200, json=TOKEN_BODY),
            "reddit_search": lambda req: httpx.Response(200, json=LISTING_BODY),
        }

    @staticmethod
    def route(request: httpx.Request) -> str:
        host = request.url.host
        if host == "newsapi.org":
            return "news"
        if host == "finnhub.io":
            return "quote"
        if host == "opensky-network.org":
            return "flights"
        if host == "www.reddit.com":
            return "reddit_token"
        if host == "oauth.reddit.com":
            return "reddit_search"
        raise AssertionError(f"unexpected request to {request.url}")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self.responders[self.route(request)](request)

    def respond(self, key: str, status: int = 200, json: Any = None, content: Optional[bytes] = None) -> None:
        if content is not None:
            self.responders[key] = lambda req: httpx.Response(status, content=content)
        else:
            self.responders[key] = lambda req: httpx.Response(status, json=json)

    def disconnect(self, key: str) -> None:
        def _raise(req: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=req)
        self.responders[key] = _raise

    def requests_for(self, key: str) -> List[httpx.Request]:
        return [r for r in self.calls if self.route(r) == key]


@pytest.fixture
def config():
    """Default engine configuration."""
    return IntelConfig()


@pytest.fixture
def credentials():
    """A full set of fake provider credentials."""
    return Credentials(
        openai_api_key="sk-test",
        news_api_key="news-key",
        finnhub_api_key="finnhub-key",
        reddit_client_id="reddit-id",
        reddit_secret="reddit-secret",
    )


@pytest.fixture
def stub():
    return ProviderStub()


@pytest.fixture
def http(stub):
    """AsyncClient whose requests are answered by the provider stub."""
    return httpx.AsyncClient(transport=httpx.MockTransport(stub))


@pytest.fixture
def aggregator(credentials, config, http):
    return IntelligenceAggregator(credentials, config, http_client=http)


class FakeLLM:
    """Stand-in for AnalysisLLM returning canned replies in order."""

    def __init__(self, *replies: Any, gate: Optional[asyncio.Event] = None):
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []
        self.gate = gate
        self.closed = False

    @property
    def is_available(self) -> bool:
        return True

    async def complete_json(self, model, messages, temperature):
        self.calls.append({"model": model, "messages": messages, "temperature": temperature})
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, asyncio.Event):
            await reply.wait()
            reply = {"threatLevel": 10, "summary": "released"}
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def aclose(self):
        self.closed = True


@pytest.fixture
def mini_reply():
    return {
        "threatLevel": 62,
        "regions": ["Eastern Europe", "Middle East", "South China Sea"],
        "probability": 18,
        "indicators": ["increased tanker sorties", "defense stocks up"],
        "summary": "Elevated but stable posture.",
    }


@pytest.fixture
def deep_reply():
    return {
        "threatLevel": 58,
        "confidenceInterval": [50, 66],
        "regions": [
            {"name": "Eastern Europe", "score": 71, "reasoning": "force build-up"},
            {"name": "Red Sea", "score": 64, "reasoning": "shipping attacks"},
        ],
        "probabilities": {"7day": 5, "30day": 15, "90day": 30},
        "indicators": {"flights": 0.3, "news": 0.5, "stocks": 0.2},
        "historicalContext": "Comparable to prior spring exercises.",
        "scenarios": ["retaliatory strike", "evacuation operation"],
        "executiveSummary": "No imminent intervention expected.",
        "monitoringPriorities": ["tanker tracks", "carrier positions"],
    }
