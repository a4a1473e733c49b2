"""Tests for config, serialization, the event bus and the task manager."""
import asyncio
import math

import pytest

from milintel.core.config import Credentials, IntelConfig
from milintel.core.event_bus import Event, EventBus, EventType
from milintel.core.task_manager import TaskManager
from milintel.serialize import camel, to_jsonable
from milintel.sources import FlightPayload, NormalizedQuote


class TestCredentials:

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-live")
        monkeypatch.setenv("NEWS_API_KEY", "n")
        monkeypatch.setenv("FINNHUB_API_KEY", "f")
        monkeypatch.delenv("REDDIT_CLIENT_ID", raising=False)
        monkeypatch.delenv("REDDIT_SECRET", raising=False)

        creds = Credentials.from_env()

        assert creds.openai_api_key == "sk-live"
        assert creds.news_api_key == "n"
        assert creds.finnhub_api_key == "f"
        assert not creds.reddit_client_id
        assert not creds.reddit_secret

    def test_defaults(self):
        config = IntelConfig()

        assert config.watch_symbols == ["LMT", "RTX", "NOC", "GD", "BA", "HII", "LHX"]
        assert config.schedule_timezone == "America/New_York"
        assert (config.mini_model, config.mini_article_cap) == ("gpt-4o-mini", 20)
        assert (config.deep_model, config.deep_article_cap) == ("gpt-4o", 30)
        assert config.skip_if_in_flight is False

    def test_model_overrides_read_per_instance(self, monkeypatch):
        monkeypatch.setenv("MINI_MODEL", "gpt-4.1-mini")
        monkeypatch.setenv("REDDIT_USER_AGENT", "ops-bot/2.0")
        overridden = IntelConfig()
        monkeypatch.delenv("MINI_MODEL")
        monkeypatch.setenv("DEEP_MODEL", "  ")

        assert overridden.mini_model == "gpt-4.1-mini"
        assert overridden.reddit_user_agent == "ops-bot/2.0"
        assert IntelConfig().mini_model == "gpt-4o-mini"
        assert IntelConfig().deep_model == "gpt-4o"


class TestSerialize:

    def test_camel(self):
        assert camel("change_percent") == "changePercent"
        assert camel("observed_at") == "observedAt"
        assert camel("price") == "price"

    def test_dataclasses_camel_cased(self):
        quote = NormalizedQuote(symbol="LMT", price=470.1, change_percent=0.8)

        assert to_jsonable(quote) == {
            "symbol": "LMT",
            "price": 470.1,
            "change": None,
            "changePercent": 0.8,
            "high": None,
            "low": None,
            "observedAt": None,
            "error": None,
        }

    def test_non_finite_floats_become_null(self):
        assert to_jsonable([1.0, math.nan, math.inf]) == [1.0, None, None]

    def test_dict_keys_untouched(self):
        assert to_jsonable({"threat_level": 1, "nested": FlightPayload()}) == {
            "threat_level": 1,
            "nested": {"count": 0, "flights": [], "error": None},
        }


class TestEventBus:

    @pytest.mark.asyncio
    async def test_publish_to_subscribers_of_type(self):
        bus = EventBus()
        ticks = bus.subscribe(EventType.TICK)
        failures = bus.subscribe(EventType.ANALYSIS_FAILED)

        await bus.publish(Event(type=EventType.TICK, data=1))

        assert ticks.get_nowait().data == 1
        assert failures.empty()

    @pytest.mark.asyncio
    async def test_full_queue_drops_oldest(self):
        bus = EventBus(maxsize=2)
        q = bus.subscribe(EventType.TICK)

        for i in range(3):
            await bus.publish(Event(type=EventType.TICK, data=i))

        assert [q.get_nowait().data, q.get_nowait().data] == [1, 2]


class TestTaskManager:

    @pytest.mark.asyncio
    async def test_spawn_tracks_until_done(self):
        tasks = TaskManager()
        gate = asyncio.Event()

        async def run():
            await gate.wait()
            return "done"

        task = tasks.spawn("analysis:mini", run())
        assert tasks.in_flight("analysis:mini") == 1
        assert tasks.in_flight("analysis:deep") == 0

        gate.set()
        await tasks.drain()

        assert task.result() == "done"
        assert tasks.in_flight("analysis:mini") == 0

    @pytest.mark.asyncio
    async def test_spawned_crash_contained(self):
        tasks = TaskManager()

        async def boom():
            raise RuntimeError("bad run")

        task = tasks.spawn("analysis:deep", boom())
        await tasks.drain()

        assert task.result() is None

    @pytest.mark.asyncio
    async def test_stop_all_cancels_services_and_runs(self):
        tasks = TaskManager()
        forever = asyncio.Event()

        service = tasks.register("cadence", forever.wait())
        run = tasks.spawn("analysis:mini", forever.wait())
        await asyncio.sleep(0)

        await tasks.stop_all()

        assert service.done()
        assert run.cancelled()

    @pytest.mark.asyncio
    async def test_wait_all_returns_when_services_finish(self):
        tasks = TaskManager()

        async def short():
            await asyncio.sleep(0)

        tasks.register("cadence", short())

        await asyncio.wait_for(tasks.wait_all(), timeout=1)
