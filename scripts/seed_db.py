"""Seed script for the entries tables.

Creates a handful of sample entries so the page and API calls have data to
read. Entries whose email already exists are skipped, so re-running is safe.
"""

from __future__ import annotations

from typing import Any, List

from backend.app.config import load_settings
from backend.app.domain.entries import (
    EntryConflictError,
    EntryService,
    build_entry_gateway,
)
from backend.app.infra.logging import configure_logging


def build_seed_entries() -> List[dict[str, Any]]:
    """Return static seed payloads in the API's camelCase wire shape."""

    return [
        {
            "name": "John Doe",
            "email": "john@example.com",
            "phone": "1234567890",
            "message": "Hello",
            "customFields": [
                {"key": "company", "value": "Acme"},
                {"key": "role", "value": "Engineer"},
            ],
        },
        {
            "name": "Jane Smith",
            "email": "jane.smith@example.com",
            "message": "Looking forward to the product demo next week.",
            "customFields": [{"key": "referral", "value": "newsletter"}],
        },
        {
            "name": "Sam Lee",
            "email": "sam.lee@example.com",
            "phone": "5550100",
        },
    ]


def seed_entries() -> tuple[int, int]:
    settings = load_settings()
    configure_logging(settings)
    service = EntryService(gateway=build_entry_gateway(settings))
    created = skipped = 0
    for payload in build_seed_entries():
        try:
            service.create_entry(payload)
        except EntryConflictError:
            skipped += 1
        else:
            created += 1
    return created, skipped


def main() -> None:
    created, skipped = seed_entries()
    print(f"Seeded {created} entries ({skipped} already present).")


if __name__ == "__main__":
    main()
