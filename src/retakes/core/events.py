from __future__ import annotations

from collections import defaultdict
from datetime import UTC, datetime
from typing import Callable, DefaultDict
from uuid import uuid4

from retakes.contracts import QueueEvent

QueueEventHandler = Callable[[QueueEvent], None]


def make_event(scope: str, event_type: str, players: list[str], **detail: object) -> QueueEvent:
    return QueueEvent(
        event_id=f"qe_{uuid4().hex[:12]}",
        time=datetime.now(UTC),
        scope=scope,
        event_type=event_type,
        players=players,
        detail=dict(detail),
    )


class EventBus:
    def __init__(self) -> None:
        self._handlers: list[QueueEventHandler] = []
        self._counter: DefaultDict[str, int] = defaultdict(int)

    def subscribe(self, handler: QueueEventHandler) -> None:
        self._handlers.append(handler)

    def publish(self, event: QueueEvent) -> None:
        self._counter[event.event_type] += 1
        for handler in self._handlers:
            handler(event)

    def emitted_count(self, event_type: str | None = None) -> int:
        if event_type is None:
            return sum(self._counter.values())
        return self._counter[event_type]
