"""Domain events published after entry writes."""

from __future__ import annotations

import logging
from typing import Any, Dict, Protocol

from .logging import get_logger

logger = get_logger(__name__)

ENTRY_CREATED = "entry.created"


class EventEmitter(Protocol):  # pragma: no cover - interface only
    def emit(self, topic: str, payload: Dict[str, Any]) -> None: ...


class LoggingEventEmitter:
    """Publishes events as structured log lines under a namespaced topic."""

    def __init__(self, namespace: str = "user_entries", level: int = logging.INFO) -> None:
        self.namespace = namespace
        self.level = level

    def emit(self, topic: str, payload: Dict[str, Any]) -> None:
        logger.log(
            self.level,
            "domain_event",
            extra={"topic": f"{self.namespace}.{topic}", "payload": dict(payload)},
        )


_emitter: LoggingEventEmitter | None = None


def get_event_emitter() -> EventEmitter:
    global _emitter
    if _emitter is None:
        _emitter = LoggingEventEmitter()
    return _emitter
