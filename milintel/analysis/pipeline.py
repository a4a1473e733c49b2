"""Tiered analysis runs: gather → prompt → model → validate → commit.

A run either commits a stamped ``AnalysisResult`` to shared state or returns
an ``AnalysisError`` and leaves the tier's slot and last-run time as they
were. Runs never raise to their caller.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ValidationError

from ..aggregator import DEEP_SOURCES, MINI_SOURCES, IntelligenceAggregator, SourceSnapshot
from ..core.config import IntelConfig, get_config
from ..core.event_bus import Event, EventBus, EventType
from ..core.logger import get_logger
from ..models import AnalysisError, AnalysisResult, Tier, utc_now_iso
from ..state import SharedState
from .llm_client import AnalysisLLM, LLMError
from .prompts import build_deep_messages, build_mini_messages
from .schemas import DeepAssessment, MiniAssessment

logger = get_logger(__name__)

RunOutcome = Union[AnalysisResult, AnalysisError]


@dataclass(frozen=True)
class TierProfile:
    tier: Tier
    sources: Tuple[str, ...]
    model: str
    temperature: float
    article_cap: int
    schema: Type[BaseModel]
    build_messages: Callable[[SourceSnapshot, int], List[Dict[str, str]]]


def tier_profiles(config: IntelConfig) -> Dict[Tier, TierProfile]:
    return {
        Tier.MINI: TierProfile(
            tier=Tier.MINI,
            sources=MINI_SOURCES,
            model=config.mini_model,
            temperature=config.mini_temperature,
            article_cap=config.mini_article_cap,
            schema=MiniAssessment,
            build_messages=build_mini_messages,
        ),
        Tier.DEEP: TierProfile(
            tier=Tier.DEEP,
            sources=DEEP_SOURCES,
            model=config.deep_model,
            temperature=config.deep_temperature,
            article_cap=config.deep_article_cap,
            schema=DeepAssessment,
            build_messages=build_deep_messages,
        ),
    }


def _validation_summary(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
    return f"reply failed validation at {loc}: {first.get('msg')}"


class AnalysisPipeline:
    """
    Runs one tier end to end.

    Usage:
        pipeline = AnalysisPipeline(aggregator, state, llm)
        outcome = await pipeline.run(Tier.MINI)
    """

    def __init__(
        self,
        aggregator: IntelligenceAggregator,
        state: SharedState,
        llm: AnalysisLLM,
        config: Optional[IntelConfig] = None,
        bus: Optional[EventBus] = None,
    ):
        self._aggregator = aggregator
        self._state = state
        self._llm = llm
        self._config = config or get_config()
        self._bus = bus
        self._profiles = tier_profiles(self._config)

    def profile(self, tier: Union[Tier, str]) -> TierProfile:
        return self._profiles[Tier.parse(tier)]

    async def run(self, tier: Union[Tier, str]) -> RunOutcome:
        profile = self.profile(tier)
        generation = self._state.begin(profile.tier)
        t0 = time.monotonic()
        logger.info("analysis_started", tier=profile.tier.value, generation=generation)

        try:
            outcome = await self._run(profile, generation)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "analysis_crashed", tier=profile.tier.value, error=str(e), exc_info=True
            )
            outcome = AnalysisError(tier=profile.tier, error=str(e) or type(e).__name__)

        elapsed_ms = round((time.monotonic() - t0) * 1000)
        if isinstance(outcome, AnalysisError):
            logger.warning(
                "analysis_failed",
                tier=profile.tier.value,
                error=outcome.error,
                elapsed_ms=elapsed_ms,
            )
            await self._publish(EventType.ANALYSIS_FAILED, outcome)
        else:
            logger.info(
                "analysis_complete",
                tier=profile.tier.value,
                threat_level=outcome.threat_level,
                elapsed_ms=elapsed_ms,
            )
            await self._publish(EventType.ANALYSIS_COMPLETE, outcome)
        return outcome

    async def _run(self, profile: TierProfile, generation: int) -> RunOutcome:
        snapshot = await self._aggregator.gather(profile.sources)
        messages = profile.build_messages(snapshot, profile.article_cap)

        try:
            raw = await asyncio.wait_for(
                self._llm.complete_json(profile.model, messages, profile.temperature),
                timeout=self._config.analysis_timeout,
            )
            assessment = profile.schema.model_validate(raw)
        except asyncio.TimeoutError:
            return AnalysisError(
                tier=profile.tier,
                error=f"analysis timed out after {self._config.analysis_timeout:g}s",
            )
        except LLMError as e:
            return AnalysisError(tier=profile.tier, error=str(e))
        except ValidationError as e:
            return AnalysisError(tier=profile.tier, error=_validation_summary(e))

        result = AnalysisResult(
            tier=profile.tier,
            produced_at=utc_now_iso(),
            model=profile.model,
            assessment=assessment.model_dump(mode="json"),
        )
        if self._state.commit(result, generation):
            logger.debug("analysis_committed", tier=profile.tier.value, generation=generation)
        else:
            logger.info(
                "analysis_commit_skipped_stale",
                tier=profile.tier.value,
                generation=generation,
            )
        return result

    async def _publish(self, event_type: EventType, outcome: RunOutcome) -> None:
        if self._bus is None:
            return
        await self._bus.publish(Event(type=event_type, data=outcome, source="analysis_pipeline"))
