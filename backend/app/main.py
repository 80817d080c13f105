"""FastAPI entrypoint for the user entries backend."""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from .api.error_handlers import database_error_handler, request_validation_error_handler
from .api.routers import entries, health, ui
from .config import load_settings
from .infra.logging import configure_logging, get_logger


def create_app() -> FastAPI:
    """Instantiate the FastAPI app and register routers."""

    settings = load_settings()
    configure_logging(settings)
    application = FastAPI(title="User Entries API", version="0.1.0")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_exception_handler(
        RequestValidationError, request_validation_error_handler
    )
    application.add_exception_handler(SQLAlchemyError, database_error_handler)
    for router in (
        health.router,
        entries.router,
        ui.router,
    ):
        application.include_router(router)
    get_logger(__name__).info(
        "app_created",
        extra={
            "environment": settings.environment,
            "storage": settings.storage.backend,
        },
    )
    return application


app = create_app()
