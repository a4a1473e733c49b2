"""Async event bus using asyncio.Queue for pub/sub notifications."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List
import time


class EventType(Enum):
    TICK = auto()
    ANALYSIS_COMPLETE = auto()
    ANALYSIS_FAILED = auto()


@dataclass
class Event:
    type: EventType
    data: Any
    timestamp: float = field(default_factory=time.time)
    source: str = ""


class EventBus:
    """Simple pub/sub event bus backed by asyncio.Queue per subscriber."""

    def __init__(self, maxsize: int = 100):
        self._subscribers: Dict[EventType, List[asyncio.Queue]] = {}
        self._maxsize = maxsize

    def subscribe(self, event_type: EventType) -> asyncio.Queue:
        """Subscribe to an event type. Returns a queue that receives events."""
        q: asyncio.Queue = asyncio.Queue(maxsize=self._maxsize)
        self._subscribers.setdefault(event_type, []).append(q)
        return q

    def unsubscribe(self, event_type: EventType, q: asyncio.Queue) -> None:
        queues = self._subscribers.get(event_type, [])
        if q in queues:
            queues.remove(q)

    async def publish(self, event: Event) -> None:
        """Publish an event to all subscribers of that type."""
        for q in self._subscribers.get(event.type, []):
            try:
                q.put_nowait(event)
            except asyncio.QueueFull:
                # Drop oldest item and insert new one
                try:
                    q.get_nowait()
                    q.put_nowait(event)
                except (asyncio.QueueEmpty, asyncio.QueueFull):
                    pass


# Global singleton
_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    global _bus
    if _bus is None:
        _bus = EventBus()
    return _bus
