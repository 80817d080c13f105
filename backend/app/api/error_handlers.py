"""Application-level exception handlers."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ..domain.entries import EntryValidationError
from ..infra.logging import get_logger

logger = get_logger(__name__)

STORAGE_ERROR_CODE = "ENTRY-STORAGE-ERROR"
STORAGE_ERROR_MESSAGE = "A storage error occurred. Please try again later."


def _envelope(error_code: str, message: str, details: dict) -> dict:
    return {
        "detail": {
            "error_code": error_code,
            "message": message,
            "details": details,
        }
    }


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 in the service's envelope."""

    errors = jsonable_encoder(exc.errors())
    logger.info(
        "request_validation_failed",
        extra={"path": request.url.path, "error_count": len(errors)},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            EntryValidationError.error_code,
            "Validation failed",
            {"errors": errors},
        ),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(
        "storage_error",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(STORAGE_ERROR_CODE, STORAGE_ERROR_MESSAGE, {}),
    )
