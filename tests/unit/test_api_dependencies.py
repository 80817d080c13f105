"""Tests for shared API dependency providers."""

from __future__ import annotations

import pytest
import sqlalchemy as sa

from backend.app.api import dependencies
from backend.app.config import Settings, StorageConfig
from backend.app.domain.entries import (
    InMemoryEntryGateway,
    PostgresEntryGateway,
    build_entry_gateway,
)
from backend.app.domain.entries import gateway as gateway_module

pytestmark = [pytest.mark.entries]


class _UnreachableEngine:
    def connect(self):
        raise sa.exc.OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.fixture()
def memory_profile(monkeypatch, tmp_path):
    (tmp_path / "dev.yaml").write_text("storage:\n  backend: memory\n", encoding="utf-8")
    monkeypatch.setenv("USER_ENTRIES_CONFIG_PROFILE", "dev")
    monkeypatch.setenv("USER_ENTRIES_CONFIG_DIR", str(tmp_path))
    dependencies._entry_gateway_singleton.cache_clear()
    dependencies._entry_service_singleton.cache_clear()
    dependencies._custom_field_cache_singleton.cache_clear()
    yield
    dependencies._entry_gateway_singleton.cache_clear()
    dependencies._entry_service_singleton.cache_clear()
    dependencies._custom_field_cache_singleton.cache_clear()


def test_service_and_gateway_are_process_wide(memory_profile):
    gateway = dependencies.get_entry_gateway()

    assert isinstance(gateway, InMemoryEntryGateway)
    assert dependencies.get_entry_gateway() is gateway
    assert dependencies.get_entry_service() is dependencies.get_entry_service()


def test_get_settings_reads_active_profile(memory_profile):
    assert dependencies.get_settings().storage.backend == "memory"


def test_build_gateway_memory_backend():
    settings = Settings(storage=StorageConfig(backend="memory"))

    assert isinstance(build_entry_gateway(settings), InMemoryEntryGateway)


def test_build_gateway_falls_back_when_database_unreachable(monkeypatch):
    monkeypatch.setattr(gateway_module, "get_engine", lambda: _UnreachableEngine())
    settings = Settings(storage=StorageConfig(backend="postgres", fallback_to_memory=True))

    assert isinstance(build_entry_gateway(settings), InMemoryEntryGateway)


def test_build_gateway_without_fallback_uses_engine(monkeypatch):
    engine = _UnreachableEngine()
    monkeypatch.setattr(gateway_module, "get_engine", lambda: engine)
    settings = Settings(storage=StorageConfig(backend="postgres"))

    gateway = build_entry_gateway(settings)

    assert isinstance(gateway, PostgresEntryGateway)


def test_custom_field_cache_is_process_wide(memory_profile):
    assert dependencies.get_custom_field_cache() is dependencies.get_custom_field_cache()
