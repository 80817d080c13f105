"""HTML rendering for the entry form and listing table."""

from __future__ import annotations

from html import escape
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from .entries_table import EntriesTable, EntryRowView
from .entry_form import EntryFormController

APP_NAME = "User Entries Application"
APP_DESCRIPTION = "Submit and view user information entries"
ADD_FIELD_BUTTON_TEXT = "+ Add Field"
SUBMIT_BUTTON_TEXT = "Submit Entry"
SUBMITTED_ENTRIES_TEXT = "Submitted Entries"
NO_ENTRIES_FOUND_TEXT = "No entries found. Submit the first entry above!"
NO_CUSTOM_FIELDS_TEXT = "No custom fields for this entry."
EMPTY_CELL = "—"


def _attr(value: Any) -> str:
    return escape(str(value), quote=True)


def _error(message: Optional[str]) -> str:
    if not message:
        return ""
    return f'<span class="field-error">{escape(message)}</span>'


def _text_input(name: str, label: str, value: str, error: Optional[str], kind: str = "text") -> str:
    return (
        f'<label for="{name}">{escape(label)}</label>'
        f'<input id="{name}" name="{name}" type="{kind}" value="{_attr(value)}">'
        f"{_error(error)}"
    )


def render_entry_form(form: EntryFormController, *, action: str = "/") -> str:
    data = form.data
    errors = form.errors
    field_errors: Dict[int, Dict[str, str]] = errors.get("custom_fields") or {}
    if not isinstance(field_errors, dict):
        field_errors = {}
    parts: List[str] = [f'<form class="entry-form" method="post" action="{_attr(action)}">']
    # First submit button in the form is the one Enter triggers.
    parts.append(
        '<button type="submit" name="action" value="submit" tabindex="-1" '
        'aria-hidden="true" style="position:absolute;left:-9999px"></button>'
    )
    if form.submit_error:
        parts.append(f'<div class="submit-error">{escape(form.submit_error)}</div>')
    parts.append(_text_input("name", "Name *", data.name, errors.get("name")))
    parts.append(_text_input("email", "Email *", data.email, errors.get("email"), "email"))
    parts.append(_text_input("phone", "Phone", data.phone, errors.get("phone"), "tel"))
    parts.append(
        '<label for="message">Message</label>'
        f'<textarea id="message" name="message">{escape(data.message)}</textarea>'
        f'{_error(errors.get("message"))}'
    )
    parts.append('<fieldset class="custom-fields"><legend>Custom Fields</legend>')
    for index, row in enumerate(data.custom_fields):
        row_errors = field_errors.get(index) or {}
        parts.append(
            f'<div class="custom-field-row" data-index="{index}">'
            f'<input name="cf_key" placeholder="Key" value="{_attr(row.key)}">'
            f'{_error(row_errors.get("key"))}'
            f'<input name="cf_value" placeholder="Value" value="{_attr(row.value)}">'
            f'{_error(row_errors.get("value"))}'
            "</div>"
        )
    parts.append(
        '<button class="add-field" type="submit" name="action" value="add_field" '
        'formnovalidate>'
        f"{escape(ADD_FIELD_BUTTON_TEXT)}</button>"
    )
    parts.append("</fieldset>")
    parts.append(
        '<button type="submit" name="action" value="submit">'
        f"{escape(SUBMIT_BUTTON_TEXT)}</button>"
    )
    parts.append("</form>")
    return "".join(parts)


def _render_expanded_row(row: EntryRowView) -> str:
    fields = row.custom_fields or ()
    if fields:
        items = "".join(
            '<div class="custom-field-item-expanded">'
            f'<span class="field-key">{escape(item.key)}:</span>'
            f'<span class="field-value">{escape(item.value)}</span>'
            "</div>"
            for item in fields
        )
        body = (
            '<div class="custom-fields-expanded"><h5>Custom Fields:</h5>'
            f'<div class="custom-fields-grid">{items}</div></div>'
        )
    else:
        body = f'<p class="no-custom-fields">{escape(NO_CUSTOM_FIELDS_TEXT)}</p>'
    return (
        f'<tr class="expanded-row" data-entry-id="{_attr(row.entry_id)}">'
        '<td colspan="6" class="expanded-content"><div class="expanded-details">'
        f"<h4>Additional Details</h4>{body}</div></td></tr>"
    )


def _toggle_href(row: EntryRowView, expanded: List[str]) -> str:
    if row.is_expanded:
        target = [entry_id for entry_id in expanded if entry_id != row.entry_id]
    else:
        target = [*expanded, row.entry_id]
    query = urlencode([("expand", entry_id) for entry_id in target])
    return f"/?{query}" if query else "/"


def _render_row(row: EntryRowView, toggle_href: str) -> str:
    toggle_label = "Collapse row" if row.is_expanded else "Expand row"
    toggle_symbol = "−" if row.is_expanded else "+"
    phone = (
        f'<a href="tel:{_attr(row.phone)}" title="{_attr(row.phone)}">{escape(row.phone)}</a>'
        if row.phone
        else f'<span class="no-data">{EMPTY_CELL}</span>'
    )
    message = (
        f'<span title="{_attr(row.message.title)}">{escape(row.message.text)}</span>'
        if row.message
        else f'<span class="no-data">{EMPTY_CELL}</span>'
    )
    html_row = (
        f'<tr class="main-row" data-entry-id="{_attr(row.entry_id)}">'
        f'<td class="expand-cell"><a class="expand-button" aria-label="{toggle_label}" '
        f'href="{_attr(toggle_href)}">{toggle_symbol}</a></td>'
        f'<td class="name-cell"><span title="{_attr(row.name.title)}">{escape(row.name.text)}</span></td>'
        f'<td class="email-cell"><a href="mailto:{_attr(row.email.title)}" '
        f'title="{_attr(row.email.title)}">{escape(row.email.text)}</a></td>'
        f'<td class="phone-cell">{phone}</td>'
        f'<td class="message-cell">{message}</td>'
        f'<td class="date-cell"><span title="{_attr(row.submitted.title)}">'
        f"{escape(row.submitted.text)}</span></td>"
        "</tr>"
    )
    if row.is_expanded:
        html_row += _render_expanded_row(row)
    return html_row


def render_entries_table(table: EntriesTable) -> str:
    rows = table.rows()
    header = (
        '<div class="table-header">'
        f"<h2>{escape(SUBMITTED_ENTRIES_TEXT)} ({len(rows)})</h2>"
        '<a class="refresh-button" href="/">Refresh</a></div>'
    )
    if not rows:
        return (
            f'<div class="entries-table-container">{header}'
            f'<div class="empty-state"><p>{escape(NO_ENTRIES_FOUND_TEXT)}</p></div></div>'
        )
    expanded = [row.entry_id for row in rows if row.is_expanded]
    body = "".join(_render_row(row, _toggle_href(row, expanded)) for row in rows)
    return (
        f'<div class="entries-table-container">{header}'
        '<div class="table-wrapper"><table class="entries-table"><thead><tr>'
        "<th></th><th>Name</th><th>Email</th><th>Phone</th><th>Message</th><th>Submitted</th>"
        f"</tr></thead><tbody>{body}</tbody></table></div></div>"
    )


def render_page(form: EntryFormController, table: EntriesTable) -> str:
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        f"<title>{escape(APP_NAME)}</title></head><body>"
        f"<header><h1>{escape(APP_NAME)}</h1><p>{escape(APP_DESCRIPTION)}</p></header>"
        f"<main>{render_entry_form(form)}{render_entries_table(table)}</main>"
        "</body></html>"
    )
