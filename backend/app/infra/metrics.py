"""Process-local counters for entry operations."""

from __future__ import annotations

from collections import Counter
from threading import Lock
from typing import Dict, Protocol

from .logging import get_logger

logger = get_logger(__name__)


class MetricsClient(Protocol):  # pragma: no cover - interface only
    def increment(self, metric: str, value: int = 1) -> None: ...


class InMemoryMetricsClient:
    """Thread-safe counter store; ``counters`` returns a copy."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._counts: Counter[str] = Counter()

    def increment(self, metric: str, value: int = 1) -> None:
        with self._lock:
            self._counts[metric] += value
            total = self._counts[metric]
        logger.debug("metric_incremented", extra={"metric": metric, "total": total})

    @property
    def counters(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)


_client: InMemoryMetricsClient | None = None


def get_metrics_client() -> MetricsClient:
    global _client
    if _client is None:
        _client = InMemoryMetricsClient()
    return _client
