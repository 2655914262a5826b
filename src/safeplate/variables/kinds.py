"""
Classification of wrapped values.

Every access on a template variable dispatches on the kind of the wrapped
value instead of probing it ad hoc.
"""
import datetime
import decimal
import enum
import fractions
import functools
import inspect
import pathlib
import uuid
from collections.abc import Mapping, MappingView, Sequence, Set
from typing import Any


class ValueKind(enum.Enum):
    """Tag of the wrapped value."""
    SCALAR = "scalar"
    COLLECTION = "collection"
    OBJECT = "object"
    THUNK = "thunk"


SCALAR_TYPES = (
    str,
    bytes,
    bytearray,
    int,
    float,
    complex,
    decimal.Decimal,
    fractions.Fraction,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    enum.Enum,
    pathlib.PurePath,
)

COLLECTION_TYPES = (Mapping, Sequence, Set, MappingView)

TEXT_TYPES = (str, bytes, bytearray)


def classify(value: Any) -> ValueKind:
    """Return the kind of a (non-None) value."""
    # bool is an int, enums may mix in str: both are caught here
    if isinstance(value, SCALAR_TYPES):
        return ValueKind.SCALAR
    if isinstance(value, COLLECTION_TYPES):
        return ValueKind.COLLECTION
    if inspect.isroutine(value) or isinstance(value, functools.partial):
        return ValueKind.THUNK
    return ValueKind.OBJECT


def is_sequence(value: Any) -> bool:
    """Ordered, indexable collection; text is not a sequence here."""
    return isinstance(value, Sequence) and not isinstance(value, TEXT_TYPES)


def json_default(value: Any) -> Any:
    """``json.dumps`` fallback: other collections become lists, anything else a string."""
    if isinstance(value, (Set, MappingView)) or is_sequence(value):
        return list(value)
    return str(value)


def is_datetime(value: Any) -> bool:
    return isinstance(value, datetime.datetime)
