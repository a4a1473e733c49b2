"""Engine façade: wires clients, state, pipeline and scheduler together.

This is the surface the HTTP router and the standalone entry point call.
Trigger methods start a run and return its outcome; every other method is
read-only and never starts a run.
"""

from typing import Any, Dict, Iterable, Optional

import httpx

from .aggregator import ALL_SOURCES, IntelligenceAggregator, SourceSnapshot
from .analysis.llm_client import AnalysisLLM
from .analysis.pipeline import AnalysisPipeline, RunOutcome
from .analysis.threat_score import ThreatScore, compute_threat_score
from .core.config import Credentials, IntelConfig, get_config
from .core.event_bus import EventBus, get_event_bus
from .core.logger import get_logger
from .core.task_manager import TaskManager
from .models import Tier
from .monitor import AnalysisMonitor
from .scheduler.ticker import CadenceScheduler
from .sources import FlightPayload, NewsPayload, NormalizedQuote, SocialPayload, VesselPayload
from .state import SharedState

logger = get_logger(__name__)


class IntelService:
    def __init__(
        self,
        aggregator: IntelligenceAggregator,
        llm: AnalysisLLM,
        state: Optional[SharedState] = None,
        config: Optional[IntelConfig] = None,
        bus: Optional[EventBus] = None,
        tasks: Optional[TaskManager] = None,
    ):
        self.config = config or get_config()
        self.state = state or SharedState()
        self.aggregator = aggregator
        self.llm = llm
        self.bus = bus
        self.tasks = tasks or TaskManager()
        self.pipeline = AnalysisPipeline(aggregator, self.state, llm, self.config, bus)
        self.scheduler = CadenceScheduler(
            self.pipeline.run, self.tasks, self.state, self.config, bus
        )
        self.monitor = AnalysisMonitor(bus) if bus is not None else None

    @classmethod
    def from_env(
        cls,
        config: Optional[IntelConfig] = None,
        bus: Optional[EventBus] = None,
    ) -> "IntelService":
        config = config or get_config()
        credentials = Credentials.from_env()
        http = httpx.AsyncClient(timeout=config.http_timeout)
        aggregator = IntelligenceAggregator(credentials, config, http_client=http)
        llm = AnalysisLLM(credentials.openai_api_key, timeout=config.analysis_timeout)
        if not llm.is_available:
            logger.warning("openai_key_missing", detail="analysis runs will fail until OPENAI_API_KEY is set")
        return cls(aggregator, llm, config=config, bus=bus or get_event_bus())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, scheduler: bool = True) -> None:
        """Start the outcome monitor and, unless disabled, the minute tick loop."""
        if scheduler:
            self.tasks.register("cadence", self.scheduler.run())
        if self.monitor is not None:
            self.tasks.register("analysis_monitor", self.monitor.run())

    async def stop(self) -> None:
        await self.tasks.stop_all()
        await self.aggregator.aclose()
        await self.llm.aclose()

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def run_analysis(self, tier: "Tier | str") -> RunOutcome:
        return await self.pipeline.run(tier)

    async def run_mini_analysis(self) -> RunOutcome:
        return await self.pipeline.run(Tier.MINI)

    async def run_deep_analysis(self) -> RunOutcome:
        return await self.pipeline.run(Tier.DEEP)

    # ------------------------------------------------------------------
    # Read / derive
    # ------------------------------------------------------------------

    def read_shared_state(self) -> Dict[str, Any]:
        return self.state.to_dict()

    async def get_aggregated_snapshot(self, sources: Iterable[str] = ALL_SOURCES) -> SourceSnapshot:
        return await self.aggregator.gather(sources)

    async def get_heuristic_score(self) -> ThreatScore:
        snapshot = await self.aggregator.gather(("news", "stocks"))
        return compute_threat_score(snapshot["news"], snapshot["stocks"], self.config)

    async def get_stock(self, symbol: str) -> NormalizedQuote:
        return await self.aggregator.client("stocks").quote(symbol)

    async def get_news(self) -> NewsPayload:
        return await self.aggregator.client("news").fetch()

    async def get_flights(self) -> FlightPayload:
        return await self.aggregator.client("flights").fetch()

    async def get_navy(self) -> VesselPayload:
        return await self.aggregator.client("navy").fetch()

    async def get_social(self) -> SocialPayload:
        return await self.aggregator.client("social").fetch()
