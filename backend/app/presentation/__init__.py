"""Presentation layer: API client, form state, listing table and HTML."""

from .api_client import ApiClientError, EntriesApiClient
from .entries_table import (
    CustomFieldCache,
    EntriesTable,
    RowState,
    format_date,
    truncate_text,
)
from .entry_form import CustomFieldRow, EntryFormController, EntryFormData
from .render import render_entries_table, render_entry_form, render_page

__all__ = [
    "ApiClientError",
    "CustomFieldCache",
    "CustomFieldRow",
    "EntriesApiClient",
    "EntriesTable",
    "EntryFormController",
    "EntryFormData",
    "RowState",
    "format_date",
    "render_entries_table",
    "render_entry_form",
    "render_page",
    "truncate_text",
]
