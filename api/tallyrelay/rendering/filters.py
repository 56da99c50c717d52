"""
Presentation filters that hide answers from the email.

A filter is any callable taking a parsed field and returning True when the
field should be left out. The document builder receives the filters to apply,
so callers can pass their own set or none at all.
"""

import re
from typing import Callable, Iterable

from tallyrelay.rendering import DocumentOptions
from tallyrelay.rendering.fields import FormField

FieldFilter = Callable[[FormField], bool]

# "Which sports? (Soccer)" style labels
OPTION_SUFFIX = re.compile(r"\(.+\)\s*$")


def option_checkbox_rule(field: FormField) -> bool:
    """
    Hide the one-box-per-option booleans Tally emits next to a CHECKBOXES answer.

    The aggregated answer already lists the selected options, so entries like
    ``Checkboxes (Soccer): true`` only add noise.
    """
    return (
        field.type == "CHECKBOXES"
        and isinstance(field.value, bool)
        and OPTION_SUFFIX.search(field.tally_label) is not None
    )


DEFAULT_FIELD_FILTERS: tuple[FieldFilter, ...] = (option_checkbox_rule,)


def filters_for(options: DocumentOptions) -> tuple[FieldFilter, ...]:
    return DEFAULT_FIELD_FILTERS if options.skip_option_checkboxes else ()


def is_hidden(field: FormField, filters: Iterable[FieldFilter]) -> bool:
    return any(rule(field) for rule in filters)
