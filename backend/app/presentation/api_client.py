"""HTTP client for the entries API used by the presentation layer."""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..domain.entries.models import CustomField, Entry
from ..infra.logging import get_logger

logger = get_logger(__name__)

API_URL_ENV = "USER_ENTRIES_API_URL"
DEFAULT_API_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_SECONDS = 10.0
GENERIC_ERROR_MESSAGE = "Request failed"


class ApiClientError(Exception):
    """Raised when the API is unreachable or answers with an error status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class EntriesApiClient:
    """Thin wrapper over ``httpx.Client`` speaking the entries wire format."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if client is None:
            client = httpx.Client(
                base_url=base_url or os.getenv(API_URL_ENV, DEFAULT_API_BASE_URL),
                timeout=timeout,
            )
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client

    def __enter__(self) -> "EntriesApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def create_entry(self, payload: Mapping[str, Any]) -> Entry:
        body = self._request("POST", "/entries", json=dict(payload))
        return entry_from_json(body)

    def list_entries(self) -> List[Entry]:
        body = self._request("GET", "/entries")
        return [entry_from_json(item) for item in body]

    def get_custom_fields(self, entry_id: str) -> List[CustomField]:
        body = self._request("GET", f"/entries/{entry_id}/custom-fields")
        return [custom_field_from_json(item) for item in body]

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        logger.debug("api_request", extra={"method": method, "url": url})
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.error(
                "api_request_failed",
                extra={"method": method, "url": url, "error": str(exc)},
            )
            raise ApiClientError(GENERIC_ERROR_MESSAGE) from exc
        logger.debug(
            "api_response",
            extra={"method": method, "url": url, "status": response.status_code},
        )
        if response.is_error:
            raise ApiClientError(
                _error_message(response), status_code=response.status_code
            )
        return response.json()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    if isinstance(detail, str) and detail:
        return detail
    return GENERIC_ERROR_MESSAGE


def _parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def custom_field_from_json(data: Mapping[str, Any]) -> CustomField:
    return CustomField(
        id=str(data["id"]),
        key=str(data["key"]),
        value=str(data["value"]),
        entry_id=str(data["entryId"]),
    )


def entry_from_json(data: Mapping[str, Any]) -> Entry:
    fields: List[Dict[str, Any]] = list(data.get("customFields") or [])
    return Entry(
        id=str(data["id"]),
        name=str(data["name"]),
        email=str(data["email"]),
        phone=data.get("phone"),
        message=data.get("message"),
        created_at=_parse_timestamp(data["createdAt"]),
        updated_at=_parse_timestamp(data["updatedAt"]),
        custom_fields=tuple(custom_field_from_json(item) for item in fields),
    )
