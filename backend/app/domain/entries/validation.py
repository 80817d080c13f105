"""Field rules applied to entry submissions.

The same rule set runs in the presentation layer (local pre-validation) and in
:class:`~backend.app.domain.entries.service.EntryService`, which is the
authoritative check. Failures are collected into a field-indexed report so a
caller can surface every problem at once; nothing is accepted partially.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .errors import EntryValidationError
from .models import CreateEntryRequest, CustomFieldInput

__all__ = [
    "EMAIL_PATTERN",
    "MAX_EMAIL_LENGTH",
    "MAX_KEY_LENGTH",
    "MAX_MESSAGE_LENGTH",
    "MAX_NAME_LENGTH",
    "MAX_PHONE_LENGTH",
    "MAX_VALUE_LENGTH",
    "ValidationResult",
    "check_entry_payload",
    "validate_entry_payload",
]

MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 255
MAX_PHONE_LENGTH = 20
MAX_MESSAGE_LENGTH = 500
MAX_KEY_LENGTH = 50
MAX_VALUE_LENGTH = 100

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[0-9]+$")


@dataclass
class ValidationResult:
    """Outcome of checking a payload; ``request`` is set only when valid."""

    errors: Dict[str, Any] = field(default_factory=dict)
    request: Optional[CreateEntryRequest] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors


def check_entry_payload(payload: Mapping[str, Any]) -> ValidationResult:
    """Apply every rule and return the error report plus normalized request."""

    errors: Dict[str, Any] = {}

    name = _required_text(payload.get("name"), "name", "Name", MAX_NAME_LENGTH, errors)

    email = _as_text(payload.get("email"), "email", "Email", errors)
    if email is not None:
        email = email.strip()
        if not email:
            errors["email"] = "Email is required"
        elif not EMAIL_PATTERN.fullmatch(email):
            errors["email"] = "Please enter a valid email address"
        elif len(email) > MAX_EMAIL_LENGTH:
            errors["email"] = f"Email must be at most {MAX_EMAIL_LENGTH} characters"

    phone = _optional_text(payload.get("phone"), "phone", "Phone", errors)
    if phone:
        if len(phone) > MAX_PHONE_LENGTH:
            errors["phone"] = f"Phone must be at most {MAX_PHONE_LENGTH} characters"
        elif not PHONE_PATTERN.fullmatch(phone):
            errors["phone"] = "Phone must contain only numbers"

    message = _optional_text(payload.get("message"), "message", "Message", errors)
    if message and len(message) > MAX_MESSAGE_LENGTH:
        errors["message"] = f"Message must be at most {MAX_MESSAGE_LENGTH} characters"

    raw_fields = payload.get("custom_fields")
    if raw_fields is None:
        raw_fields = payload.get("customFields")
    custom_fields = _check_custom_fields(raw_fields, errors)

    if errors:
        return ValidationResult(errors=errors)
    assert name is not None and email is not None
    return ValidationResult(
        request=CreateEntryRequest(
            name=name,
            email=email,
            phone=phone or None,
            message=message or None,
            custom_fields=tuple(custom_fields),
        )
    )


def validate_entry_payload(payload: Mapping[str, Any]) -> CreateEntryRequest:
    """Return the normalized request or raise :class:`EntryValidationError`."""

    result = check_entry_payload(payload)
    if not result.is_valid:
        raise EntryValidationError(result.errors)
    assert result.request is not None
    return result.request


def _as_text(
    value: Any, field_name: str, label: str, errors: Dict[str, Any]
) -> Optional[str]:
    if value is None:
        return ""
    if not isinstance(value, str):
        errors[field_name] = f"{label} must be a string"
        return None
    return value


def _required_text(
    value: Any,
    field_name: str,
    label: str,
    max_length: int,
    errors: Dict[str, Any],
) -> Optional[str]:
    text = _as_text(value, field_name, label, errors)
    if text is None:
        return None
    text = text.strip()
    if not text:
        errors[field_name] = f"{label} is required"
    elif len(text) > max_length:
        errors[field_name] = f"{label} must be at most {max_length} characters"
    return text


def _optional_text(
    value: Any, field_name: str, label: str, errors: Dict[str, Any]
) -> Optional[str]:
    text = _as_text(value, field_name, label, errors)
    if text is None:
        return None
    return text.strip() or None


def _check_custom_fields(
    raw_fields: Any, errors: Dict[str, Any]
) -> List[CustomFieldInput]:
    if raw_fields is None:
        return []
    if isinstance(raw_fields, (str, bytes)) or not isinstance(raw_fields, Sequence):
        errors["custom_fields"] = "Custom fields must be a list"
        return []

    accepted: List[CustomFieldInput] = []
    field_errors: Dict[int, Dict[str, str]] = {}
    for index, item in enumerate(raw_fields):
        if not isinstance(item, Mapping):
            field_errors[index] = {"key": "Custom field must be an object"}
            continue
        pair_errors: Dict[str, str] = {}
        key = _pair_side(item.get("key"), "key", "Key", pair_errors)
        value = _pair_side(item.get("value"), "value", "Value", pair_errors)
        if pair_errors:
            field_errors[index] = pair_errors
            continue
        if not key and not value:
            continue
        if key and not value:
            pair_errors["value"] = "Value is required when key is provided"
        elif value and not key:
            pair_errors["key"] = "Key is required when value is provided"
        if len(key) > MAX_KEY_LENGTH:
            pair_errors["key"] = f"Key must be at most {MAX_KEY_LENGTH} characters"
        if len(value) > MAX_VALUE_LENGTH:
            pair_errors["value"] = (
                f"Value must be at most {MAX_VALUE_LENGTH} characters"
            )
        if pair_errors:
            field_errors[index] = pair_errors
            continue
        accepted.append(CustomFieldInput(key=key, value=value))

    if field_errors:
        errors["custom_fields"] = field_errors
    return accepted


def _pair_side(value: Any, side: str, label: str, pair_errors: Dict[str, str]) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        pair_errors[side] = f"{label} must be a string"
        return ""
    return value.strip()
