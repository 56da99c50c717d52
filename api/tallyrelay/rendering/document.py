"""Build the notification email (subject, HTML, plain text) for a Tally submission."""

from typing import Any, Iterable, Optional

from tallyrelay.rendering import DocumentOptions, RenderedDocument
from tallyrelay.rendering.dates import format_submitted_at
from tallyrelay.rendering.fields import HIGHLIGHT_TYPES, FormField, as_text, parse_fields
from tallyrelay.rendering.filters import FieldFilter, filters_for, is_hidden
from tallyrelay.rendering.format_value import escape, format_value_text, render_field

DEFAULT_FORM_NAME = "Tally Form"
MAX_HIGHLIGHTS = 4

# Email clients drop <style> blocks, so everything is inlined.
_STYLES = {
    "body": "margin:0;padding:0;background:#f4f5f7;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Helvetica,Arial,sans-serif;color:#222;line-height:1.5;",
    "wrap": "max-width:720px;margin:0 auto;padding:32px 16px;",
    "card": "background:#ffffff;border-radius:8px;overflow:hidden;box-shadow:0 2px 8px rgba(0,0,0,0.08);",
    "head": "background:#1a1a2e;padding:24px 32px;color:#ffffff;",
    "title": "margin:0;color:#ffffff;font-size:20px;font-weight:600;",
    "sub": "margin:6px 0 0 0;color:#b8b8d0;font-size:12px;letter-spacing:0.8px;text-transform:uppercase;",
    "chips": "margin-top:12px;",
    "chip": "display:inline-block;padding:5px 12px;margin:0 8px 8px 0;border-radius:4px;background:#2b2b45;color:#ffffff;font-size:12px;",
    "sec": "padding:24px 32px;border-top:1px solid #eee;",
    "h2": "margin:0 0 14px 0;color:#666;font-size:12px;font-weight:600;letter-spacing:1px;text-transform:uppercase;",
    "table": "width:100%;border-collapse:collapse;",
    "metaK": "padding:10px 14px;border:1px solid #eee;background:#fafafa;width:180px;font-weight:600;font-size:13px;color:#555;",
    "metaV": "padding:10px 14px;border:1px solid #eee;font-size:14px;color:#222;",
    "q": "padding:12px 14px;border-bottom:1px solid #eee;vertical-align:top;width:240px;background:#fafafa;",
    "a": "padding:12px 14px;border-bottom:1px solid #eee;vertical-align:top;",
    "label": "margin:0;font-weight:600;font-size:14px;color:#555;",
    "empty": "color:#999;font-style:italic;",
    "muted": "margin-top:16px;color:#999;font-size:12px;font-style:italic;",
    "foot": "padding:16px 32px;background:#fafafa;border-top:1px solid #eee;color:#999;font-size:12px;",
}


def _text(value: Any, default: str = "") -> str:
    return default if value is None else as_text(value)


def build_subject(form_name: str, submission_id: str, prefix: str) -> str:
    """Single-line subject; CR, LF and other whitespace runs collapse to one space."""
    subject = f"{prefix} {form_name}" if prefix else form_name
    if submission_id:
        subject += f" (#{submission_id})"
    return " ".join(subject.split())


def collect_highlights(fields: Iterable[FormField], limit: int = MAX_HIGHLIGHTS) -> list[tuple[str, str]]:
    """First ``limit`` email / phone / rating / scale answers with a scalar value, in form order."""
    highlights = []
    for f in fields:
        if len(highlights) >= limit:
            break
        if f.type not in HIGHLIGHT_TYPES or not f.tally_label:
            continue
        if f.value is None or f.value == "" or isinstance(f.value, (list, dict)):
            continue
        highlights.append((f.tally_label, format_value_text(f.value)))
    return highlights


def _meta_rows(data: dict, payload: dict, options: DocumentOptions) -> list[tuple[str, str]]:
    form_name = _text(data.get("formName"), DEFAULT_FORM_NAME)
    created_at = _text(data.get("createdAt"), _text(payload.get("createdAt")))
    submitted_at = format_submitted_at(
        created_at, options.timezone, options.date_format, options.time_format
    )

    meta = [("Form", form_name)]
    if options.show_ids:
        for key, title in (
            ("formId", "Form ID"),
            ("submissionId", "Submission ID"),
            ("respondentId", "Respondent ID"),
        ):
            value = _text(data.get(key))
            if key == "submissionId" and not value:
                value = _text(data.get("responseId"))
            if value:
                meta.append((title, value))
    if submitted_at:
        meta.append(("Submitted At", submitted_at))
    return meta


def _render_html(
    form_name: str,
    meta: list[tuple[str, str]],
    highlights: list[tuple[str, str]],
    answers: list[tuple[str, str]],
    sender_name: str,
) -> str:
    s = _STYLES

    meta_rows = "".join(
        "<tr>"
        f'<td style="{s["metaK"]}">{escape(k)}</td>'
        f'<td style="{s["metaV"]}">{escape(v)}</td>'
        "</tr>"
        for k, v in meta
    )

    chips_html = ""
    if highlights:
        chips = " ".join(
            f'<span style="{s["chip"]}">{escape(label)}: <strong>{escape(value)}</strong></span>'
            for label, value in highlights
        )
        chips_html = f'<div style="{s["chips"]}">{chips}</div>'

    answer_rows = "".join(
        "<tr>"
        f'<td style="{s["q"]}"><div style="{s["label"]}">{escape(label)}</div></td>'
        f'<td style="{s["a"]}">{value_html}</td>'
        "</tr>"
        for label, value_html in answers
    )
    if not answer_rows:
        answer_rows = (
            f'<tr><td colspan="2" style="{s["a"]}">'
            f'<span style="{s["empty"]}">No fields found.</span></td></tr>'
        )

    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="{s['body']}">
  <div style="{s['wrap']}">
    <div style="{s['card']}">
      <div style="{s['head']}">
        <h1 style="{s['title']}">{escape(form_name)}</h1>
        <div style="{s['sub']}">New Submission Received</div>
        {chips_html}
      </div>
      <div style="{s['sec']}">
        <div style="{s['h2']}">Submission Details</div>
        <table cellpadding="0" cellspacing="0" style="{s['table']}">{meta_rows}</table>
      </div>
      <div style="{s['sec']}">
        <div style="{s['h2']}">Responses</div>
        <table cellpadding="0" cellspacing="0" style="{s['table']}">{answer_rows}</table>
        <div style="{s['muted']}">This is an automated notification. Please do not reply to this email.</div>
      </div>
      <div style="{s['foot']}">Delivered by {escape(sender_name)}</div>
    </div>
  </div>
</body>
</html>"""


def build_document(
    payload: Any,
    options: Optional[DocumentOptions] = None,
    field_filters: Optional[Iterable[FieldFilter]] = None,
) -> RenderedDocument:
    """
    Render a Tally webhook payload into the notification email.

    Missing or malformed parts of the payload fall back to defaults; this
    function does not raise for data-shape reasons.
    """
    options = options or DocumentOptions()
    filters = tuple(field_filters) if field_filters is not None else filters_for(options)

    payload = payload if isinstance(payload, dict) else {}
    data = payload.get("data")
    data = data if isinstance(data, dict) else {}

    form_name = _text(data.get("formName"), DEFAULT_FORM_NAME)
    submission_id = _text(data.get("submissionId")) or _text(data.get("responseId"))

    fields = parse_fields(data.get("fields"))
    visible = [f for f in fields if not is_hidden(f, filters)]
    rendered = [(f, render_field(f)) for f in visible]

    meta = _meta_rows(data, payload, options)
    highlights = collect_highlights(fields)

    html_body = _render_html(
        form_name,
        meta,
        highlights,
        [(f.label, r.html) for f, r in rendered],
        options.sender_name or "TallyRelay",
    )

    lines = [f"{form_name} - New submission"]
    lines.extend(f"{k}: {v}" for k, v in meta)
    lines.append("")
    lines.append("Answers:")
    lines.extend(f"- {f.label}: {r.text}" for f, r in rendered)
    text_body = "\n".join(lines) + "\n"

    return RenderedDocument(
        subject=build_subject(form_name, submission_id, options.subject_prefix),
        html=html_body,
        text=text_body,
    )
