"""Core infrastructure: config, logger, event bus, task manager."""
from .event_bus import EventBus, EventType, Event, get_event_bus
from .task_manager import TaskManager, setup_signal_handlers
from .config import Credentials, IntelConfig, get_config
from .logger import setup_logging, get_logger

__all__ = [
    "EventBus", "EventType", "Event", "get_event_bus",
    "TaskManager", "setup_signal_handlers",
    "Credentials", "IntelConfig", "get_config",
    "setup_logging", "get_logger",
]
