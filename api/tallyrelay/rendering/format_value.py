"""
Field value formatter for Tally answers.

Every answer is rendered twice: once as a safe HTML fragment for the email body
and once as a raw plain-text value for the text/plain part. All user-supplied
text goes through ``html.escape`` before it is embedded in HTML.
"""

import html
import json
import re
from functools import singledispatch
from typing import Any
from urllib.parse import quote

from tallyrelay.rendering import RenderedField
from tallyrelay.rendering.fields import (
    ChoiceField,
    FileField,
    FormField,
    GenericField,
    MatrixField,
    RankingField,
    as_text,
)

EMPTY = "<em>(empty)</em>"
NO_FILES = "<em>(no files)</em>"
NONE_SELECTED = "<em>(none selected)</em>"
NONE = "<em>(none)</em>"
NESTED = "<em>(nested)</em>"

# Lists and objects nested deeper than this are not expanded.
MAX_DEPTH = 32

_URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
_NEWLINE = re.compile(r"\r\n|\r|\n")
# Reserved and already-encoded characters are left alone, everything else is percent-encoded.
_URL_SAFE = ":/?#[]@!$&'()*+,;=%~"


def escape(value: Any) -> str:
    return html.escape(as_text(value), quote=True)


def escape_url(url: str) -> str:
    return html.escape(quote(url, safe=_URL_SAFE), quote=True)


def looks_like_url(value: str) -> bool:
    return bool(_URL_PATTERN.match(value))


def link(url: str, label: str) -> str:
    return f'<a href="{escape_url(url)}" target="_blank" rel="noopener noreferrer">{label}</a>'


def format_scalar_html(value: Any) -> str:
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float)):
        return escape(value)

    text = as_text(value)
    if text == "":
        return EMPTY
    if looks_like_url(text):
        return link(text, escape(text))
    return _NEWLINE.sub("<br>\n", escape(text))


def format_value_html(value: Any, depth: int = 0) -> str:
    """Render an arbitrary JSON value: lists as <ul>, objects as a key/value table."""
    if isinstance(value, (list, dict)) and value and depth >= MAX_DEPTH:
        return NESTED

    if isinstance(value, list):
        if not value:
            return EMPTY
        items = "".join(f"<li>{format_value_html(v, depth + 1)}</li>" for v in value)
        return f"<ul>{items}</ul>"

    if isinstance(value, dict):
        if not value:
            return EMPTY
        rows = "".join(
            "<tr>"
            '<td style="padding:6px 10px;border:1px solid #eee;background:#fafafa;">'
            f"<code>{escape(k)}</code></td>"
            f'<td style="padding:6px 10px;border:1px solid #eee;">{format_value_html(v, depth + 1)}</td>'
            "</tr>"
            for k, v in value.items()
        )
        return f'<table cellpadding="0" cellspacing="0" style="border-collapse:collapse;">{rows}</table>'

    return format_scalar_html(value)


def format_value_text(value: Any) -> str:
    """
    Plain-text form of a raw value.

    - ``None`` becomes an empty string, booleans Yes / No.
    - Strings and numbers are returned unescaped.
    - Lists and objects are serialized as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, dict)):
        try:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
        except (TypeError, ValueError, RecursionError):
            return "[complex value]"
    return as_text(value)


@singledispatch
def format_field_html(field: FormField) -> str:
    raise TypeError(f"No renderer for field variant {type(field).__name__}")


@format_field_html.register
def _format_files(field: FileField) -> str:
    items = []
    for upload in field.files:
        name = escape(upload.name)
        size = f" ({escape(upload.size)} bytes)" if upload.size is not None else ""
        if upload.url:
            items.append(f"{link(upload.url, name)}{size}")
        else:
            items.append(f"{name}{size}")
    if not items:
        return NO_FILES
    return "<ul><li>" + "</li><li>".join(items) + "</li></ul>"


@format_field_html.register
def _format_choice(field: ChoiceField) -> str:
    labels = [escape(field.options.get(option_id, option_id)) for option_id in field.selected]
    return ", ".join(labels) if labels else NONE_SELECTED


@format_field_html.register
def _format_ranking(field: RankingField) -> str:
    labels = [escape(field.options.get(option_id, option_id)) for option_id in field.ranked]
    if not labels:
        return NONE_SELECTED
    return "<ol><li>" + "</li><li>".join(labels) + "</li></ol>"


@format_field_html.register
def _format_matrix(field: MatrixField) -> str:
    lines = []
    for row_id, col_ids in field.answers:
        row_label = escape(field.rows.get(row_id, row_id))
        chosen = [escape(field.columns.get(col_id, col_id)) for col_id in col_ids]
        lines.append(f"<strong>{row_label}:</strong> " + (", ".join(chosen) if chosen else NONE))
    return "<br>".join(lines) if lines else EMPTY


@format_field_html.register
def _format_generic(field: GenericField) -> str:
    return format_value_html(field.value)


def render_field(field: FormField) -> RenderedField:
    """Render one answer as an HTML fragment plus its plain-text value."""
    return RenderedField(html=format_field_html(field), text=format_value_text(field.value))
