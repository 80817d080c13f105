"""Entries domain package."""

from .errors import (
    EntryConflictError,
    EntryNotFoundError,
    EntryServiceError,
    EntryValidationError,
)
from .gateway import (
    EntryGateway,
    InMemoryEntryGateway,
    PostgresEntryGateway,
    build_entry_gateway,
)
from .models import CreateEntryRequest, CustomField, CustomFieldInput, Entry
from .service import EntryService
from .tables import EntryTables, build_tables
from .validation import ValidationResult, check_entry_payload, validate_entry_payload

__all__ = [
    "CreateEntryRequest",
    "CustomField",
    "CustomFieldInput",
    "Entry",
    "EntryConflictError",
    "EntryGateway",
    "EntryNotFoundError",
    "EntryService",
    "EntryServiceError",
    "EntryTables",
    "EntryValidationError",
    "InMemoryEntryGateway",
    "PostgresEntryGateway",
    "ValidationResult",
    "build_entry_gateway",
    "build_tables",
    "check_entry_payload",
    "validate_entry_payload",
]
