"""Minute tick loop that turns cadence decisions into background runs."""

import asyncio
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional
from zoneinfo import ZoneInfo

from ..core.config import IntelConfig, get_config
from ..core.event_bus import Event, EventBus, EventType
from ..core.logger import get_logger
from ..core.task_manager import TaskManager
from ..models import Tier
from ..state import SharedState
from .cadence import ScheduleDecision, decide_at, next_run

logger = get_logger(__name__)

TierRunner = Callable[[Tier], Awaitable[object]]


class CadenceScheduler:
    """
    Evaluates the cadence once per tick and dispatches each triggered tier
    as its own task. ``tick`` never waits on the runs it starts.

    Usage:
        scheduler = CadenceScheduler(pipeline.run, tasks, state)
        tasks.register("cadence", scheduler.run())
    """

    def __init__(
        self,
        runner: TierRunner,
        tasks: TaskManager,
        state: SharedState,
        config: Optional[IntelConfig] = None,
        bus: Optional[EventBus] = None,
    ):
        self._runner = runner
        self._tasks = tasks
        self._state = state
        self._config = config or get_config()
        self._bus = bus
        self._tz = ZoneInfo(self._config.schedule_timezone)
        self._last_minute: Optional[datetime] = None

    @staticmethod
    def run_name(tier: Tier) -> str:
        return f"analysis:{tier.value}"

    async def tick(self, now: Optional[datetime] = None) -> ScheduleDecision:
        """Handle one time tick. Repeated ticks within the same minute are ignored."""
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        minute = now.astimezone(timezone.utc).replace(second=0, microsecond=0)

        if minute == self._last_minute:
            logger.debug("tick_duplicate_minute", minute=minute.isoformat())
            return ScheduleDecision()
        self._last_minute = minute

        decision = decide_at(minute, self._tz)
        dispatched = [t.value for t in decision.tiers if self.dispatch(t) is not None]
        self._refresh_next_runs(minute)

        if decision.tiers:
            logger.info("tick_dispatched", minute=minute.isoformat(), tiers=dispatched)
        if self._bus is not None:
            await self._bus.publish(Event(type=EventType.TICK, data=decision, source="cadence"))
        return decision

    def dispatch(self, tier: Tier) -> Optional[asyncio.Task]:
        """Start one tier run in the background."""
        name = self.run_name(tier)
        if self._config.skip_if_in_flight and self._tasks.in_flight(name):
            logger.info("dispatch_skipped_in_flight", tier=tier.value)
            return None
        return self._tasks.spawn(name, self._runner(tier))

    def _refresh_next_runs(self, after: datetime) -> None:
        for tier in Tier:
            when = next_run(after, tier, self._tz)
            self._state.set_next_run(tier, when.isoformat() if when else None)

    def in_flight(self) -> Dict[str, int]:
        return {t.value: self._tasks.in_flight(self.run_name(t)) for t in Tier}

    async def run(self) -> None:
        """Tick at each interval boundary until cancelled."""
        interval = self._config.tick_interval
        logger.info("cadence_scheduler_started", interval=interval, tz=self._config.schedule_timezone)
        self._refresh_next_runs(datetime.now(timezone.utc))
        while True:
            try:
                await asyncio.sleep(interval - (time.time() % interval))
            except asyncio.CancelledError:
                logger.info("cadence_scheduler_stopped")
                raise
            try:
                await self.tick()
            except Exception as e:
                logger.error("tick_failed", error=str(e), exc_info=True)
