"""Exceptions raised by the entries domain."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict


class EntryServiceError(Exception):
    """Domain exception propagated to API handlers."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    error_code: str = "ENTRY-ERROR"

    def __init__(
        self,
        message: str,
        *,
        details: Dict[str, Any] | None = None,
        status_code: HTTPStatus | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code


class EntryValidationError(EntryServiceError):
    """Malformed, missing or oversized fields in a submission."""

    status_code = HTTPStatus.BAD_REQUEST
    error_code = "ENTRY-INVALID-REQUEST"

    def __init__(self, errors: Dict[str, Any], message: str = "Validation failed") -> None:
        super().__init__(message, details={"errors": errors})
        self.errors = errors


class EntryConflictError(EntryServiceError):
    status_code = HTTPStatus.CONFLICT
    error_code = "ENTRY-CONFLICT"

    def __init__(self, email: str) -> None:
        super().__init__(
            "An entry with this email already exists",
            details={"email": email},
        )
        self.email = email


class EntryNotFoundError(EntryServiceError):
    status_code = HTTPStatus.NOT_FOUND
    error_code = "ENTRY-NOT-FOUND"

    def __init__(self, entry_id: str) -> None:
        super().__init__(
            f"Entry with ID {entry_id} not found",
            details={"id": entry_id},
        )
        self.entry_id = entry_id
