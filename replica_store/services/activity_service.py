"""Bounded history of store activity."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List

from ..messaging import InMemoryBus, MessageEnvelope
from ..telemetry import TelemetryCollector


@dataclass
class ActivityService:
    bus: InMemoryBus
    telemetry: TelemetryCollector
    topics: Iterable[str] = ()
    history: int = 200
    events: Deque[MessageEnvelope] = field(default_factory=deque, init=False)

    def __post_init__(self) -> None:
        self.events = deque(maxlen=self.history)
        for topic in self.topics:
            self.bus.subscribe(topic, self._handle_event)

    def recent(self, limit: int = 10) -> List[MessageEnvelope]:
        if limit <= 0:
            return []
        return list(self.events)[-limit:]

    def _handle_event(self, envelope: MessageEnvelope) -> None:
        self.events.append(envelope)
        self.telemetry.emit_event(f"activity_{envelope.topic}", envelope.payload)
