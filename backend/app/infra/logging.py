"""Structured logging helpers shared by the backend."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from ..config import Settings

ROOT_LOGGER_NAME = "user_entries"

# Attributes every LogRecord carries; anything else arrived via ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Render records as one JSON object per line, folding in ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(extract_extra(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class PlainFormatter(logging.Formatter):
    """Human-readable variant used for local development."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extra = extract_extra(record)
        if not extra:
            return base
        rendered = " ".join(f"{key}={value!r}" for key, value in extra.items())
        return f"{base} {rendered}"


def extract_extra(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the application namespace."""

    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(settings: Settings) -> logging.Logger:
    """Install a single stream handler on the application root logger."""

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(settings.logging.level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler()
    if settings.logging.format == "plain":
        handler.setFormatter(PlainFormatter())
    else:
        handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)
    root.propagate = False
    return root
