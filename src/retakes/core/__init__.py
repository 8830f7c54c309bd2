from .config import DEFAULT_PRIORITY_TAGS, QueueConfig, QueueSettings, get_settings, parse_priority_tags
from .errors import QueueConfigError, ReentrantUpdateError, RosterIntegrityError, build_integrity_report
from .events import EventBus, make_event

__all__ = [
    "DEFAULT_PRIORITY_TAGS",
    "EventBus",
    "QueueConfig",
    "QueueConfigError",
    "QueueSettings",
    "ReentrantUpdateError",
    "RosterIntegrityError",
    "build_integrity_report",
    "get_settings",
    "make_event",
    "parse_priority_tags",
]
