"""Router exports for FastAPI composition."""

from . import entries, health, ui

__all__ = ["entries", "health", "ui"]
