"""Shared API dependencies."""

from __future__ import annotations

from functools import lru_cache

from ..config import Settings, load_settings
from ..domain.entries import EntryGateway, EntryService, build_entry_gateway
from ..presentation import CustomFieldCache

__all__ = [
    "get_custom_field_cache",
    "get_entry_gateway",
    "get_entry_service",
    "get_settings",
]


@lru_cache()
def _entry_gateway_singleton() -> EntryGateway:
    return build_entry_gateway()


def get_entry_gateway() -> EntryGateway:
    """Return the process-wide entry gateway instance."""

    return _entry_gateway_singleton()


@lru_cache()
def _entry_service_singleton() -> EntryService:
    return EntryService(gateway=get_entry_gateway())


def get_entry_service() -> EntryService:
    """Return the entry service singleton."""

    return _entry_service_singleton()


@lru_cache()
def _custom_field_cache_singleton() -> CustomFieldCache:
    return CustomFieldCache()


def get_custom_field_cache() -> CustomFieldCache:
    """Return the page's custom-field cache, shared by every request."""

    return _custom_field_cache_singleton()


def get_settings() -> Settings:
    """Return settings for the active profile."""

    return load_settings()
