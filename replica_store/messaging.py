"""Simple message bus for store events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, DefaultDict, Dict, List
from collections import defaultdict


@dataclass
class MessageEnvelope:
    topic: str
    payload: Dict[str, Any] = field(default_factory=dict)


class InMemoryBus:
    """Synchronous pub/sub bus; handlers run inline with the publisher."""

    def __init__(self) -> None:
        self._subscribers: DefaultDict[str, List[Callable[[MessageEnvelope], None]]] = defaultdict(list)

    def publish(self, envelope: MessageEnvelope) -> None:
        for callback in list(self._subscribers[envelope.topic]):
            callback(envelope)

    def subscribe(self, topic: str, handler: Callable[[MessageEnvelope], None]) -> None:
        self._subscribers[topic].append(handler)


def build_bus(backend: str = "in-memory") -> InMemoryBus:
    if backend != "in-memory":
        raise NotImplementedError("Only the in-memory backend is available")
    return InMemoryBus()
