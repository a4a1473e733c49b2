"""Cadence decisions and the tick loop that dispatches tier runs."""
from .cadence import ScheduleDecision, Window, decide, decide_at, next_run, window_for
from .ticker import CadenceScheduler

__all__ = [
    "ScheduleDecision", "Window", "decide", "decide_at", "next_run", "window_for",
    "CadenceScheduler",
]
