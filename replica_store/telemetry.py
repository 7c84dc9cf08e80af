"""Observability scaffolding."""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import DefaultDict, Deque, Dict
from datetime import datetime, timezone

from .config import ObservabilityConfig
from .models import ObservabilityEvent


@dataclass
class TelemetryCollector:
    """Keeps the most recent ``event_history`` samples plus running totals per metric."""

    config: ObservabilityConfig
    metrics: Deque[Dict[str, object]] = field(init=False)
    events: Deque[ObservabilityEvent] = field(init=False)
    totals: DefaultDict[str, float] = field(default_factory=lambda: defaultdict(float), init=False)

    def __post_init__(self) -> None:
        self.metrics = deque(maxlen=self.config.event_history)
        self.events = deque(maxlen=self.config.event_history)

    def emit_metric(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        payload = {
            "name": name,
            "value": value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **(labels or {}),
        }
        self.metrics.append(payload)
        self.totals[name] += float(value)

    def emit_event(self, message: str, attributes: Dict[str, object] | None = None) -> None:
        self.events.append(ObservabilityEvent(event_type="custom", message=message, attributes=attributes))

    def metric_total(self, name: str) -> float:
        return self.totals.get(name, 0.0)
