"""Database connection helpers."""

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from ...config import load_settings


@lru_cache()
def get_engine() -> Engine:
    """Return the process-wide engine built from the active settings."""

    settings = load_settings()
    return create_engine(settings.database_url, echo=settings.database_echo, future=True)
