"""Creation form state with local pre-validation.

Local checks only spare the user a round trip; the service validates again and
remains the enforcement point.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..domain.entries.models import Entry
from ..domain.entries.validation import check_entry_payload
from ..infra.logging import get_logger
from .api_client import ApiClientError

logger = get_logger(__name__)

SubmitEntry = Callable[[Mapping[str, Any]], Entry]

TEXT_FIELDS = ("name", "email", "phone", "message")


@dataclass
class CustomFieldRow:
    key: str = ""
    value: str = ""

    @property
    def is_blank(self) -> bool:
        return not self.key.strip() and not self.value.strip()


@dataclass
class EntryFormData:
    name: str = ""
    email: str = ""
    phone: str = ""
    message: str = ""
    custom_fields: List[CustomFieldRow] = field(default_factory=list)

    def validation_payload(self) -> Dict[str, Any]:
        """Every row, blank ones included, so error indexes match the form."""

        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "message": self.message,
            "custom_fields": [
                {"key": row.key, "value": row.value} for row in self.custom_fields
            ],
        }

    def to_payload(self) -> Dict[str, Any]:
        """Request body for ``POST /entries``; blank pairs are not submitted."""

        payload: Dict[str, Any] = {
            "name": self.name.strip(),
            "email": self.email.strip(),
        }
        if self.phone.strip():
            payload["phone"] = self.phone.strip()
        if self.message.strip():
            payload["message"] = self.message.strip()
        pairs = [
            {"key": row.key.strip(), "value": row.value.strip()}
            for row in self.custom_fields
            if not row.is_blank
        ]
        if pairs:
            payload["customFields"] = pairs
        return payload


class EntryFormController:
    """Holds form data and errors and drives submission."""

    def __init__(
        self, submit_entry: SubmitEntry, data: Optional[EntryFormData] = None
    ) -> None:
        self._submit_entry = submit_entry
        self.data = data or EntryFormData()
        self.errors: Dict[str, Any] = {}
        self.submit_error: Optional[str] = None
        self.submit_status: Optional[int] = None
        self.is_submitting = False

    def update_field(self, name: str, value: str) -> None:
        if name not in TEXT_FIELDS:
            raise ValueError(f"Unknown form field: {name}")
        setattr(self.data, name, value)
        self.errors.pop(name, None)

    def add_custom_field(self) -> None:
        self.data.custom_fields.append(CustomFieldRow())

    def remove_custom_field(self, index: int) -> None:
        del self.data.custom_fields[index]
        # Row errors are index based; stale ones would point at the wrong row.
        self.errors.pop("custom_fields", None)

    def update_custom_field(self, index: int, side: str, value: str) -> None:
        if side not in ("key", "value"):
            raise ValueError(f"Unknown custom field side: {side}")
        setattr(self.data.custom_fields[index], side, value)
        row_errors = (self.errors.get("custom_fields") or {}).get(index)
        if row_errors:
            row_errors.pop(side, None)

    def validate(self) -> bool:
        result = check_entry_payload(self.data.validation_payload())
        self.errors = result.errors
        logger.debug(
            "form_validation_completed",
            extra={"is_valid": result.is_valid, "error_fields": sorted(result.errors)},
        )
        return result.is_valid

    def submit(self) -> Optional[Entry]:
        """Validate locally then submit; resets the form on success."""

        self.submit_error = None
        self.submit_status = None
        if not self.validate():
            return None
        self.is_submitting = True
        try:
            entry = self._submit_entry(self.data.to_payload())
        except ApiClientError as exc:
            self.submit_error = exc.message
            self.submit_status = exc.status_code
            logger.warning(
                "form_submit_failed",
                extra={"status": exc.status_code, "error": exc.message},
            )
            return None
        finally:
            self.is_submitting = False
        self.data = EntryFormData()
        self.errors = {}
        return entry
