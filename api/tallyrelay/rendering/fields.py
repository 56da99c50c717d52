"""
Typed view of the answers in a Tally submission.

Tally sends every answer as a loose JSON object keyed by a free-form ``type``
tag. ``parse_field`` turns one of those objects into a closed set of variants:

  FileField     FILE_UPLOAD / SIGNATURE with a list of uploads
  ChoiceField   MULTIPLE_CHOICE / CHECKBOXES / DROPDOWN / MULTI_SELECT with a list of option ids
  RankingField  RANKING with an ordered list of option ids
  MatrixField   MATRIX with a row id -> column ids mapping
  GenericField  everything else, carrying the raw value

Parsing never raises; anything that does not fit a specific variant becomes a
GenericField.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

FILE_TYPES = frozenset({"FILE_UPLOAD", "SIGNATURE"})
CHOICE_TYPES = frozenset({"MULTIPLE_CHOICE", "CHECKBOXES", "DROPDOWN", "MULTI_SELECT"})
RANKING_TYPE = "RANKING"
MATRIX_TYPE = "MATRIX"

# Types surfaced as header chips, in no particular priority.
HIGHLIGHT_TYPES = frozenset({"INPUT_EMAIL", "INPUT_PHONE_NUMBER", "RATING", "LINEAR_SCALE"})

DEFAULT_LABEL = "Field"


def as_text(value: Any) -> str:
    """Stringify an id or scalar so numeric and string ids compare equal."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_label_map(entries: Any) -> dict[str, str]:
    """Map ``id`` -> ``text`` for a list of ``{id, text}`` objects, skipping incomplete ones."""
    mapping: dict[str, str] = {}
    if not isinstance(entries, list):
        return mapping
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        if entry.get("id") is None or entry.get("text") is None:
            continue
        mapping[as_text(entry["id"])] = as_text(entry["text"])
    return mapping


@dataclass(frozen=True)
class FormField:
    label: str
    type: str
    value: Any
    # the "label" key only, without the key / default fallback
    tally_label: str = ""


@dataclass(frozen=True)
class UploadedFile:
    name: str
    url: str = ""
    size: Optional[str] = None


@dataclass(frozen=True)
class FileField(FormField):
    files: tuple[UploadedFile, ...] = ()


@dataclass(frozen=True)
class ChoiceField(FormField):
    selected: tuple[str, ...] = ()
    options: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RankingField(FormField):
    ranked: tuple[str, ...] = ()
    options: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MatrixField(FormField):
    answers: tuple[tuple[str, tuple[str, ...]], ...] = ()
    rows: Mapping[str, str] = field(default_factory=dict)
    columns: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GenericField(FormField):
    pass


def _label(raw: dict) -> str:
    for key in ("label", "key"):
        if raw.get(key) is not None:
            return as_text(raw[key])
    return DEFAULT_LABEL


def _uploads(value: list) -> tuple[UploadedFile, ...]:
    files = []
    for item in value:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        url = item.get("url")
        size = item.get("size")
        files.append(
            UploadedFile(
                name=as_text(name) if name is not None else "file",
                url=url if isinstance(url, str) else "",
                size=as_text(size) if size is not None else None,
            )
        )
    return tuple(files)


def _matrix_answers(value: Any) -> tuple[tuple[str, tuple[str, ...]], ...]:
    items = value.items() if isinstance(value, dict) else enumerate(value)
    answers = []
    for row_id, col_ids in items:
        if isinstance(col_ids, dict):
            col_ids = list(col_ids.values())
        chosen = tuple(as_text(c) for c in col_ids) if isinstance(col_ids, list) else ()
        answers.append((as_text(row_id), chosen))
    return tuple(answers)


def parse_field(raw: Any) -> Optional[FormField]:
    """Build the field variant for one raw answer object. Returns None for non-objects."""
    if not isinstance(raw, dict):
        return None

    type_ = as_text(raw.get("type"))
    value = raw.get("value")
    common = {
        "label": _label(raw),
        "type": type_,
        "value": value,
        "tally_label": as_text(raw.get("label")),
    }

    if type_ in FILE_TYPES and isinstance(value, list):
        return FileField(**common, files=_uploads(value))

    if type_ in CHOICE_TYPES and isinstance(value, list):
        return ChoiceField(
            **common,
            selected=tuple(as_text(v) for v in value),
            options=build_label_map(raw.get("options")),
        )

    if type_ == RANKING_TYPE and isinstance(value, list):
        return RankingField(
            **common,
            ranked=tuple(as_text(v) for v in value),
            options=build_label_map(raw.get("options")),
        )

    if type_ == MATRIX_TYPE and isinstance(value, (dict, list)):
        return MatrixField(
            **common,
            answers=_matrix_answers(value),
            rows=build_label_map(raw.get("rows")),
            columns=build_label_map(raw.get("columns")),
        )

    return GenericField(**common)


def parse_fields(raw_fields: Any) -> list[FormField]:
    """Parse a ``fields`` array in order, dropping entries that are not objects."""
    if not isinstance(raw_fields, list):
        return []
    parsed = (parse_field(raw) for raw in raw_fields)
    return [f for f in parsed if f is not None]
