"""Server-rendered page with the entry form and listing table."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from fastapi import APIRouter, Depends, Form, Query, status
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from ...api.dependencies import get_custom_field_cache, get_entry_service
from ...domain.entries import CustomField, Entry, EntryService, EntryServiceError
from ...infra.logging import get_logger
from ...presentation import (
    ApiClientError,
    CustomFieldCache,
    CustomFieldRow,
    EntriesTable,
    EntryFormController,
    EntryFormData,
    render_page,
)

router = APIRouter(tags=["ui"])
logger = get_logger(__name__)

ADD_FIELD_ACTION = "add_field"


def _as_client_error(exc: EntryServiceError) -> ApiClientError:
    return ApiClientError(exc.message, status_code=int(exc.status_code))


def _fetcher(service: EntryService):
    def fetch(entry_id: str) -> List[CustomField]:
        try:
            return service.get_custom_fields(entry_id)
        except EntryServiceError as exc:
            raise _as_client_error(exc) from exc

    return fetch


def _submitter(service: EntryService):
    def submit(payload: Mapping[str, Any]) -> Entry:
        try:
            return service.create_entry(payload)
        except EntryServiceError as exc:
            raise _as_client_error(exc) from exc

    return submit


def _build_table(
    service: EntryService, cache: CustomFieldCache, expand: List[str]
) -> EntriesTable:
    table = EntriesTable(_fetcher(service), service.list_entries(), shared_cache=cache)
    known = {entry.id for entry in table.entries}
    for entry_id in dict.fromkeys(expand):
        if entry_id in known:
            table.toggle_row(entry_id)
    return table


def _custom_field_rows(keys: List[str], values: List[str]) -> List[CustomFieldRow]:
    return [
        CustomFieldRow(key=key, value=values[index] if index < len(values) else "")
        for index, key in enumerate(keys)
    ]


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def show_page(
    expand: Optional[List[str]] = Query(None),
    service: EntryService = Depends(get_entry_service),
    cache: CustomFieldCache = Depends(get_custom_field_cache),
) -> HTMLResponse:
    form = EntryFormController(_submitter(service))
    form.add_custom_field()
    table = _build_table(service, cache, expand or [])
    return HTMLResponse(render_page(form, table))


@router.post("/", response_class=HTMLResponse, include_in_schema=False)
async def submit_form(
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    message: str = Form(""),
    cf_key: List[str] = Form([]),
    cf_value: List[str] = Form([]),
    action: str = Form(""),
    service: EntryService = Depends(get_entry_service),
    cache: CustomFieldCache = Depends(get_custom_field_cache),
):
    data = EntryFormData(
        name=name,
        email=email,
        phone=phone,
        message=message,
        custom_fields=_custom_field_rows(cf_key, cf_value),
    )
    form = EntryFormController(_submitter(service), data)
    if action == ADD_FIELD_ACTION:
        form.add_custom_field()
        status_code = status.HTTP_200_OK
    else:
        entry = await run_in_threadpool(form.submit)
        if entry is not None:
            logger.info("form_entry_created", extra={"entry_id": entry.id})
            return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
        if form.errors:
            status_code = status.HTTP_400_BAD_REQUEST
        else:
            status_code = form.submit_status or status.HTTP_500_INTERNAL_SERVER_ERROR
    table = await run_in_threadpool(_build_table, service, cache, [])
    return HTMLResponse(render_page(form, table), status_code=status_code)
