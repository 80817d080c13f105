"""Entry endpoints: create, list and custom-field lookup."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...api.dependencies import get_entry_service
from ...domain.entries import (
    CustomField,
    Entry,
    EntryService,
    EntryServiceError,
)
from ...infra.logging import get_logger

router = APIRouter(prefix="/entries", tags=["entries"])
logger = get_logger(__name__)

EntryId = Annotated[str, Path(description="Identifier of the owning entry")]


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CustomFieldBody(CamelModel):
    model_config = ConfigDict(extra="forbid")

    key: Optional[str] = None
    value: Optional[str] = None


class EntryCreateRequest(CamelModel):
    """Request body for POST /entries.

    Field rules live in the domain validator so that violations surface as a
    single field-indexed report; this model only fixes the payload's shape.
    """

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    custom_fields: Optional[List[CustomFieldBody]] = None


class CustomFieldRecord(CamelModel):
    id: str
    key: str
    value: str
    entry_id: str


class EntryRecord(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    custom_fields: List[CustomFieldRecord] = Field(default_factory=list)


def _to_custom_field_record(field: CustomField) -> CustomFieldRecord:
    return CustomFieldRecord(
        id=field.id,
        key=field.key,
        value=field.value,
        entry_id=field.entry_id,
    )


def _to_record(entry: Entry) -> EntryRecord:
    return EntryRecord(
        id=entry.id,
        name=entry.name,
        email=entry.email,
        phone=entry.phone,
        message=entry.message,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
        custom_fields=[_to_custom_field_record(item) for item in entry.custom_fields],
    )


def _handle_service_error(exc: EntryServiceError) -> HTTPException:
    return HTTPException(
        status_code=int(exc.status_code),
        detail={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


@router.post(
    "",
    response_model=EntryRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Create entry with custom fields",
)
def create_entry(
    payload: EntryCreateRequest,
    service: EntryService = Depends(get_entry_service),
) -> EntryRecord:
    try:
        entry = service.create_entry(payload.model_dump())
    except EntryServiceError as exc:
        logger.info(
            "entry_create_rejected",
            extra={"error_code": exc.error_code, "status": int(exc.status_code)},
        )
        raise _handle_service_error(exc) from exc
    return _to_record(entry)


@router.get(
    "",
    response_model=List[EntryRecord],
    summary="List entries newest first",
)
def list_entries(
    service: EntryService = Depends(get_entry_service),
) -> List[EntryRecord]:
    return [_to_record(entry) for entry in service.list_entries()]


@router.get(
    "/{entry_id}/custom-fields",
    response_model=List[CustomFieldRecord],
    summary="List an entry's custom fields",
)
def list_custom_fields(
    entry_id: EntryId,
    service: EntryService = Depends(get_entry_service),
) -> List[CustomFieldRecord]:
    try:
        fields = service.get_custom_fields(entry_id)
    except EntryServiceError as exc:
        raise _handle_service_error(exc) from exc
    return [_to_custom_field_record(item) for item in fields]
