"""Serve the API and page with uvicorn using the active profile."""

import uvicorn

from backend.app.config import load_settings


if __name__ == "__main__":
    settings = load_settings()
    uvicorn.run(
        "backend.app.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
    )
