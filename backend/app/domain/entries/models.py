"""Entry and CustomField records shared across the backend."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple
from uuid import uuid4

__all__ = [
    "CreateEntryRequest",
    "CustomField",
    "CustomFieldInput",
    "Entry",
    "new_id",
    "utcnow",
]


def utcnow() -> datetime:
    """Return timezone-aware UTC timestamp."""

    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class CustomFieldInput:
    """A key/value pair as submitted, before it is owned by an Entry."""

    key: str
    value: str


@dataclass(frozen=True)
class CreateEntryRequest:
    """Validated and normalized submission accepted by the gateway."""

    name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    custom_fields: Tuple[CustomFieldInput, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CustomField:
    """A stored key/value pair owned by exactly one Entry."""

    id: str
    key: str
    value: str
    entry_id: str

    def as_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "key": self.key,
            "value": self.value,
            "entry_id": self.entry_id,
        }


@dataclass(frozen=True)
class Entry:
    """A stored submission with its custom fields in insertion order."""

    id: str
    name: str
    email: str
    phone: Optional[str]
    message: Optional[str]
    created_at: datetime
    updated_at: datetime
    custom_fields: Tuple[CustomField, ...] = field(default_factory=tuple)

    @classmethod
    def new(
        cls,
        request: CreateEntryRequest,
        *,
        entry_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> "Entry":
        """Factory that generates the id, timestamps and owned custom fields."""

        ts = timestamp or utcnow()
        identifier = entry_id or new_id()
        return cls(
            id=identifier,
            name=request.name,
            email=request.email,
            phone=request.phone,
            message=request.message,
            created_at=ts,
            updated_at=ts,
            custom_fields=tuple(
                CustomField(
                    id=new_id(),
                    key=item.key,
                    value=item.value,
                    entry_id=identifier,
                )
                for item in request.custom_fields
            ),
        )

    def with_custom_fields(self, custom_fields: Sequence[CustomField]) -> "Entry":
        return replace(self, custom_fields=tuple(custom_fields))
