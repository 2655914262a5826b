"""
Escape modes and the shared HTML escaping routine.
"""
from enum import Enum
from typing import Any

from markupsafe import escape as _markup_escape


class EscapeMode(str, Enum):
    """How a template variable is stringified."""
    HTML = "html"
    RAW = "raw"


def html_escape(value: Any) -> str:
    """
    Stringify a value and escape the five HTML-significant characters.

    Template variables are escaped from their raw serialization, so an
    already-escaping wrapper is never escaped twice. ``None`` becomes an
    empty string.
    """
    # Local import: value.py imports this module.
    from .value import EscapedValue

    if value is None:
        return ""
    if isinstance(value, EscapedValue):
        value = value.raw_value()
    return str(_markup_escape(str(value)))
