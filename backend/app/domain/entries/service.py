"""Entry service orchestrating validation + persistence."""

from __future__ import annotations

from typing import Any, List, Mapping

from ...infra.events import ENTRY_CREATED, EventEmitter, get_event_emitter
from ...infra.logging import get_logger
from ...infra.metrics import MetricsClient, get_metrics_client
from .errors import EntryConflictError, EntryNotFoundError
from .gateway import EntryGateway, InMemoryEntryGateway
from .models import CustomField, Entry, utcnow
from .validation import validate_entry_payload

logger = get_logger(__name__)


class EntryService:
    """Validation + uniqueness layer over entry persistence."""

    def __init__(
        self,
        *,
        gateway: EntryGateway | None = None,
        event_emitter: EventEmitter | None = None,
        metrics: MetricsClient | None = None,
    ) -> None:
        self._gateway = gateway or InMemoryEntryGateway()
        self._event_emitter = event_emitter or get_event_emitter()
        self._metrics = metrics or get_metrics_client()

    def create_entry(self, payload: Mapping[str, Any]) -> Entry:
        """Validate, reject duplicate emails, then insert entry and children."""

        request = validate_entry_payload(payload)
        logger.info(
            "entry_create_started",
            extra={
                "email": request.email,
                "custom_fields": len(request.custom_fields),
            },
        )
        # Advisory check; the storage unique constraint still backs it.
        if self._gateway.find_by_email(request.email) is not None:
            raise self._conflict(request.email)
        try:
            entry = self._gateway.insert_entry(request)
        except EntryConflictError as exc:
            raise self._conflict(request.email) from exc
        self._safe_metrics_increment("entries_created_total")
        self._emit_created(entry)
        logger.info(
            "entry_create_succeeded",
            extra={"entry_id": entry.id, "custom_fields": len(entry.custom_fields)},
        )
        return entry

    def list_entries(self) -> List[Entry]:
        """Return every entry newest first, custom fields included."""

        entries = self._gateway.find_all()
        logger.info("entry_list_fetched", extra={"count": len(entries)})
        return entries

    def get_custom_fields(self, entry_id: str) -> List[CustomField]:
        """Return an entry's custom fields ordered by key."""

        if self._gateway.find_by_id(entry_id) is None:
            logger.warning("entry_custom_fields_not_found", extra={"entry_id": entry_id})
            raise EntryNotFoundError(entry_id)
        fields = self._gateway.find_custom_fields(entry_id)
        logger.info(
            "entry_custom_fields_fetched",
            extra={"entry_id": entry_id, "count": len(fields)},
        )
        return fields

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _conflict(self, email: str) -> EntryConflictError:
        self._safe_metrics_increment("entries_conflict_total")
        logger.warning("entry_create_conflict", extra={"email": email})
        return EntryConflictError(email)

    def _emit_created(self, entry: Entry) -> None:
        payload = {
            "entry_id": entry.id,
            "email": entry.email,
            "custom_fields": len(entry.custom_fields),
            "occurred_at": utcnow().isoformat(),
        }
        try:
            self._event_emitter.emit(ENTRY_CREATED, payload)
        except Exception:  # pragma: no cover
            logger.exception(
                "entry_event_emit_failed",
                extra={"topic": ENTRY_CREATED, "entry_id": entry.id},
            )

    def _safe_metrics_increment(self, metric: str, value: int = 1) -> None:
        try:
            self._metrics.increment(metric, value)
        except Exception:  # pragma: no cover
            logger.exception(
                "metrics_increment_failed",
                extra={"metric": metric, "value": value},
            )
