"""Tests for snapshot aggregation and source isolation."""
import asyncio

import pytest

from milintel.aggregator import DEEP_SOURCES, MINI_SOURCES, IntelligenceAggregator
from milintel.sources import FlightPayload, NewsClient, NewsPayload, SocialPayload, VesselPayload


class ExplodingNewsClient(NewsClient):
    """A client that breaks its own never-raise contract."""

    async def fetch(self):
        raise RuntimeError("bug in client")


class SlowNewsClient(NewsClient):
    def __init__(self, *args, delay: float, **kwargs):
        super().__init__(*args, **kwargs)
        self.delay = delay

    async def fetch(self):
        await asyncio.sleep(self.delay)
        return NewsPayload()


class TestGather:

    @pytest.mark.asyncio
    async def test_mini_snapshot_keys(self, aggregator):
        snapshot = await aggregator.gather(MINI_SOURCES)

        assert list(snapshot) == ["news", "stocks", "flights"]
        assert isinstance(snapshot["news"], NewsPayload)
        assert isinstance(snapshot["flights"], FlightPayload)
        assert len(snapshot["stocks"]) == 7

    @pytest.mark.asyncio
    async def test_deep_snapshot_keys(self, aggregator):
        snapshot = await aggregator.gather(DEEP_SOURCES)

        assert set(snapshot) == {"news", "stocks", "flights", "navy", "social"}
        assert isinstance(snapshot["navy"], VesselPayload)
        assert isinstance(snapshot["social"], SocialPayload)
        assert snapshot["social"].error is None

    @pytest.mark.asyncio
    async def test_duplicate_names_collapsed(self, aggregator):
        snapshot = await aggregator.gather(["news", "news", "flights"])

        assert list(snapshot) == ["news", "flights"]

    @pytest.mark.asyncio
    async def test_unknown_source_rejected(self, aggregator):
        with pytest.raises(ValueError, match="unknown source"):
            await aggregator.gather(["news", "satellites"])

    @pytest.mark.asyncio
    async def test_single_name_string(self, aggregator):
        snapshot = await aggregator.gather("news")

        assert list(snapshot) == ["news"]
        assert len(snapshot["news"].articles) == 3


class TestIsolation:
    """One provider failing never disturbs the others."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("broken", ["news", "quote", "flights", "reddit_token", "reddit_search"])
    async def test_single_provider_down(self, aggregator, stub, broken):
        baseline = await aggregator.gather(DEEP_SOURCES)
        stub.disconnect(broken)

        degraded = await aggregator.gather(DEEP_SOURCES)

        assert set(degraded) == set(DEEP_SOURCES)
        affected = {
            "news": "news", "quote": "stocks", "flights": "flights",
            "reddit_token": "social", "reddit_search": "social",
        }[broken]
        for name in DEEP_SOURCES:
            if name == affected:
                continue
            if name == "stocks":
                assert [(q.symbol, q.price) for q in degraded[name]] == \
                       [(q.symbol, q.price) for q in baseline[name]]
            else:
                assert degraded[name] == baseline[name]

    @pytest.mark.asyncio
    async def test_all_providers_down(self, aggregator, stub):
        for key in ("news", "quote", "flights", "reddit_token"):
            stub.disconnect(key)

        snapshot = await aggregator.gather(DEEP_SOURCES)

        assert snapshot["news"].articles == [] and snapshot["news"].error
        assert all(q.error for q in snapshot["stocks"])
        assert snapshot["flights"].count == 0 and snapshot["flights"].error
        assert snapshot["social"].posts == [] and snapshot["social"].error
        assert snapshot["navy"].vessels == []

    @pytest.mark.asyncio
    async def test_raising_client_replaced_by_fallback(self, credentials, config, http):
        agg = IntelligenceAggregator(
            credentials, config, http_client=http,
            clients={"news": ExplodingNewsClient(credentials, config, http)},
        )

        snapshot = await agg.gather(MINI_SOURCES)

        assert snapshot["news"].articles == []
        assert snapshot["news"].error == "bug in client"
        assert snapshot["flights"].count == 2

    @pytest.mark.asyncio
    async def test_sources_run_concurrently(self, credentials, config, http):
        """Three 0.2s fetches settle in well under 0.6s."""
        agg = IntelligenceAggregator(credentials, config, http_client=http)
        agg.clients = {
            name: SlowNewsClient(credentials, config, http, delay=0.2)
            for name in ("news", "stocks", "flights")
        }

        loop = asyncio.get_running_loop()
        t0 = loop.time()
        await agg.gather(MINI_SOURCES)

        assert loop.time() - t0 < 0.5
