"""FastAPI tests for the entry endpoints."""

from __future__ import annotations

import pytest
import sqlalchemy as sa
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

from backend.app.api.dependencies import get_entry_service
from backend.app.api.error_handlers import (
    database_error_handler,
    request_validation_error_handler,
)
from backend.app.api.routers import entries
from backend.app.domain.entries import EntryService, InMemoryEntryGateway
from backend.app.infra.metrics import InMemoryMetricsClient

pytestmark = [pytest.mark.entries]

JOHN = {
    "name": "John Doe",
    "email": "john@example.com",
    "phone": "1234567890",
    "message": "Hello",
    "customFields": [
        {"key": "role", "value": "Engineer"},
        {"key": "company", "value": "Acme"},
    ],
}


class _BrokenStorageService:
    def list_entries(self):
        raise sa.exc.OperationalError("SELECT 1", {}, Exception("connection refused"))


def _build_client(service) -> TestClient:
    app = FastAPI()
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(sa.exc.SQLAlchemyError, database_error_handler)
    app.include_router(entries.router)
    app.dependency_overrides[get_entry_service] = lambda: service
    return TestClient(app)


@pytest.fixture()
def service() -> EntryService:
    return EntryService(
        gateway=InMemoryEntryGateway(), metrics=InMemoryMetricsClient()
    )


@pytest.fixture()
def client(service) -> TestClient:
    return _build_client(service)


def test_create_entry_returns_created_record(client):
    response = client.post("/entries", json=JOHN)

    assert response.status_code == 201
    body = response.json()
    assert set(body) == {
        "id",
        "name",
        "email",
        "phone",
        "message",
        "createdAt",
        "updatedAt",
        "customFields",
    }
    assert body["name"] == "John Doe"
    assert body["createdAt"] == body["updatedAt"]
    assert [(f["key"], f["value"]) for f in body["customFields"]] == [
        ("role", "Engineer"),
        ("company", "Acme"),
    ]
    assert {f["entryId"] for f in body["customFields"]} == {body["id"]}


def test_create_entry_without_optional_fields(client):
    response = client.post("/entries", json={"name": "Solo", "email": "solo@example.com"})

    assert response.status_code == 201
    body = response.json()
    assert body["phone"] is None
    assert body["message"] is None
    assert body["customFields"] == []


def test_create_entry_validation_error_envelope(client):
    response = client.post(
        "/entries",
        json={"name": "", "email": "not-an-email", "customFields": [{"key": "k"}]},
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["error_code"] == "ENTRY-INVALID-REQUEST"
    assert detail["message"] == "Validation failed"
    errors = detail["details"]["errors"]
    assert errors["name"] == "Name is required"
    assert errors["email"] == "Please enter a valid email address"
    assert errors["custom_fields"] == {
        "0": {"value": "Value is required when key is provided"}
    }


def test_create_entry_rejects_unknown_fields(client, service):
    response = client.post("/entries", json={**JOHN, "isAdmin": True})

    assert response.status_code == 400
    assert response.json()["detail"]["error_code"] == "ENTRY-INVALID-REQUEST"
    assert service.list_entries() == []


def test_create_entry_rejects_wrong_types(client):
    response = client.post("/entries", json={"name": 123, "email": "a@b.co"})

    assert response.status_code == 400
    assert response.json()["detail"]["details"]["errors"]


def test_create_entry_duplicate_email_conflicts(client):
    assert client.post("/entries", json=JOHN).status_code == 201

    response = client.post("/entries", json={"name": "Jane", "email": "john@example.com"})

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["error_code"] == "ENTRY-CONFLICT"
    assert detail["message"] == "An entry with this email already exists"


def test_list_entries_newest_first(client):
    assert client.get("/entries").json() == []
    client.post("/entries", json={"name": "One", "email": "one@example.com"})
    client.post("/entries", json={"name": "Two", "email": "two@example.com"})

    response = client.get("/entries")

    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Two", "One"]


def test_custom_fields_sorted_by_key(client):
    created = client.post("/entries", json=JOHN).json()

    response = client.get(f"/entries/{created['id']}/custom-fields")

    assert response.status_code == 200
    body = response.json()
    assert [f["key"] for f in body] == ["company", "role"]
    assert set(body[0]) == {"id", "key", "value", "entryId"}


def test_custom_fields_unknown_entry_is_404(client):
    response = client.get("/entries/nope/custom-fields")

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["error_code"] == "ENTRY-NOT-FOUND"
    assert detail["message"] == "Entry with ID nope not found"


def test_storage_failure_maps_to_500():
    client = _build_client(_BrokenStorageService())

    response = client.get("/entries")

    assert response.status_code == 500
    assert response.json()["detail"]["error_code"] == "ENTRY-STORAGE-ERROR"


def test_custom_fields_long_unknown_id_is_404(client):
    entry_id = "x" * 65

    response = client.get(f"/entries/{entry_id}/custom-fields")

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["error_code"] == "ENTRY-NOT-FOUND"
    assert detail["message"] == f"Entry with ID {entry_id} not found"
