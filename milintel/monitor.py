"""Event-bus consumer that records and logs analysis run outcomes."""

import asyncio
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Optional

from .core.event_bus import Event, EventBus, EventType
from .core.logger import get_logger
from .models import AnalysisError, Tier

logger = get_logger(__name__)

WATCHED = (EventType.TICK, EventType.ANALYSIS_COMPLETE, EventType.ANALYSIS_FAILED)


class AnalysisMonitor:
    """
    Counts completed and failed runs per tier and keeps a short history.

    Subscribes on construction so nothing published before ``run`` starts
    is missed.

    Usage:
        monitor = AnalysisMonitor(bus)
        tasks.register("analysis_monitor", monitor.run())
    """

    def __init__(self, bus: EventBus, history: int = 50):
        self._bus = bus
        self._queues = {et: bus.subscribe(et) for et in WATCHED}
        self.completed: Dict[str, int] = {t.value: 0 for t in Tier}
        self.failed: Dict[str, int] = {t.value: 0 for t in Tier}
        self.last_error: Dict[str, Optional[str]] = {t.value: None for t in Tier}
        self.last_tick: Optional[str] = None
        self.recent: Deque[Dict[str, Any]] = deque(maxlen=history)

    def handle(self, event: Event) -> None:
        if event.type is EventType.TICK:
            self.last_tick = datetime.fromtimestamp(event.timestamp, timezone.utc).isoformat()
            return

        outcome = event.data
        tier = outcome.tier.value
        if isinstance(outcome, AnalysisError):
            self.failed[tier] += 1
            self.last_error[tier] = outcome.error
            logger.warning("analysis_run_failed", tier=tier, error=outcome.error)
        else:
            self.completed[tier] += 1
            logger.info("analysis_run_recorded", tier=tier, threat_level=outcome.threat_level)
        self.recent.append({
            "tier": tier,
            "ok": not isinstance(outcome, AnalysisError),
            "producedAt": outcome.produced_at,
        })

    async def run(self) -> None:
        """Consume watched events until cancelled."""
        async def _consume(event_type: EventType, queue: asyncio.Queue):
            while True:
                event: Event = await queue.get()
                try:
                    self.handle(event)
                except Exception as e:
                    logger.error("event_handle_error", type=event_type.name, error=str(e))

        tasks = [asyncio.create_task(_consume(et, q)) for et, q in self._queues.items()]
        try:
            await asyncio.gather(*tasks)
        finally:
            for t in tasks:
                t.cancel()
            for et, q in self._queues.items():
                self._bus.unsubscribe(et, q)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completed": dict(self.completed),
            "failed": dict(self.failed),
            "lastError": dict(self.last_error),
            "lastTick": self.last_tick,
            "recent": list(self.recent),
        }
