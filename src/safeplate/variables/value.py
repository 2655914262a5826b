"""
Template variables: read-only proxies that escape on stringification.

Every value handed to a template body is wrapped in an ``EscapedValue``.
Any value produced by accessing it (items, attributes, method results,
call results) is wrapped again with the same escape mode, so escaping
follows the data through arbitrarily deep access chains.
"""
import datetime
import functools
import json
import logging
import pprint
from collections.abc import Mapping, Sequence, Sized
from typing import Any, Iterator, Optional, Tuple
from zoneinfo import ZoneInfo

from ..error.exceptions import (
    ErrorContext,
    MissingAttributeError,
    NotCallableError,
    ReadOnlyViolationError,
    TypeMismatchError,
    UnreachableModeError,
)
from .escape import EscapeMode, html_escape
from .kinds import ValueKind, classify, is_datetime, json_default
from .widgets import HtmlWidgetsMixin

logger = logging.getLogger(__name__)

# datetime methods that honour the _timeZone global
DATE_FORMAT_METHODS = frozenset({"strftime", "isoformat", "format"})

TIME_ZONE_VARIABLE = "_timeZone"


def resolve_time_zone(zone: Any) -> datetime.tzinfo:
    """Turn a zone name, tzinfo or wrapped zone into a tzinfo."""
    if isinstance(zone, EscapedValue):
        zone = zone.get_value()
    if isinstance(zone, datetime.tzinfo):
        return zone
    return ZoneInfo(str(zone))


class EscapedValue(HtmlWidgetsMixin):
    """
    Read-only view over one runtime value.

    ``str()`` escapes HTML in ``EscapeMode.HTML`` and returns the raw
    serialization in ``EscapeMode.RAW``. Use ``.raw`` to bypass escaping.

    A wrapper object is always truthy, even when it wraps ``0``, ``""``,
    ``[]`` or ``False``. Templates must use ``is_true()``/``is_empty()``
    or ``Engine.check()`` to test the wrapped value.
    """

    __slots__ = ("_name", "_value", "_escape_mode", "_engine", "_kind")

    def __init__(self, name: str, value: Any, escape_mode: EscapeMode = EscapeMode.HTML, engine=None):
        """
        Wrap a value.

        Args:
            name: Diagnostic label (variable, key or method path)
            value: The wrapped value; never None
            escape_mode: Escape mode, inherited by every derived value
            engine: Owning engine, used for the time zone global
        """
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_escape_mode", escape_mode)
        object.__setattr__(self, "_engine", engine)
        object.__setattr__(self, "_kind", classify(value))

    @classmethod
    def create(cls, name: str, value: Any, escape_mode: EscapeMode = EscapeMode.HTML, engine=None) -> Any:
        """
        Wrap a value unless it is None or already wrapped.

        Returns:
            ``value`` itself for None and existing wrappers, otherwise a new wrapper
        """
        if value is None or isinstance(value, EscapedValue):
            return value
        return cls(name, value, escape_mode, engine)

    def _derive(self, name: str, value: Any) -> Any:
        return self.create(name, value, self._escape_mode, self._engine)

    def _context(self, operation: str, **details) -> ErrorContext:
        return ErrorContext("EscapedValue", operation, variable=self._name, **details)

    # read-only guards

    def __setattr__(self, name: str, value: Any) -> None:
        raise ReadOnlyViolationError(f"{self._name}.{name}", context=self._context("setattr"))

    def __delattr__(self, name: str) -> None:
        raise ReadOnlyViolationError(f"{self._name}.{name}", context=self._context("delattr"))

    def __setitem__(self, key: Any, value: Any) -> None:
        raise ReadOnlyViolationError(f"{self._name}[{key}]", context=self._context("setitem"))

    def __delitem__(self, key: Any) -> None:
        raise ReadOnlyViolationError(f"{self._name}[{key}]", context=self._context("delitem"))

    def __copy__(self) -> "EscapedValue":
        return self

    def __deepcopy__(self, memo) -> "EscapedValue":
        return self

    # structural access

    def __getattr__(self, name: str) -> Any:
        """
        ``wrapped.key``: item or attribute of the wrapped value.

        Collections and objects resolve ``key`` like ``wrapped[key]``.
        Scalars expose their own attributes and methods (``name.upper()``).
        """
        if (name.startswith("__") and name.endswith("__")) or name in EscapedValue.__slots__:
            raise AttributeError(name)

        if self._kind is ValueKind.SCALAR:
            value = self._value
            if is_datetime(value) and name in DATE_FORMAT_METHODS:
                return self._derive(f"{self._name}.{name}", functools.partial(self.invoke, name))
            try:
                attribute = getattr(value, name)
            except AttributeError:
                raise MissingAttributeError(
                    f"tried to access property {name} of non-object and non-array {self._name}",
                    context=self._context("get", key=name),
                ) from None
            return self._derive(f"{self._name}.{name}", attribute)

        return self[name]

    def __getitem__(self, key: Any) -> Any:
        """
        ``wrapped[key]``: entry of a collection or field of an object.

        Missing entries yield None.

        Raises:
            TypeMismatchError: If the wrapped value is neither a collection nor an object
        """
        kind = self._kind
        if kind is ValueKind.COLLECTION:
            value = self._lookup_item(key)
        elif kind is ValueKind.OBJECT:
            value = getattr(self._value, str(key), None)
        else:
            raise TypeMismatchError(
                f"tried to access property {key} of non-object and non-array {self._name}",
                context=self._context("index", key=key),
            )
        return self._derive(f"{self._name}[{key}]", value)

    def _lookup_item(self, key: Any) -> Any:
        value = self._value
        if isinstance(value, Mapping):
            return value.get(key)
        if not isinstance(key, int) or isinstance(key, bool):
            return None
        # sets and views have no index; use their iteration order
        items = value if isinstance(value, Sequence) else list(value)
        if -len(items) <= key < len(items):
            return items[key]
        return None

    def __contains__(self, key: Any) -> bool:
        kind = self._kind
        if kind is ValueKind.COLLECTION:
            return key in self._value
        if kind is ValueKind.OBJECT:
            return hasattr(self._value, str(key))
        raise TypeMismatchError(
            f"tried to test membership in non-object and non-array {self._name}",
            context=self._context("contains", key=key),
        )

    def __iter__(self) -> Iterator[Tuple[Any, Any]]:
        """Iterate ``(key, wrapped item)`` pairs of a collection in its natural order."""
        if self._kind is not ValueKind.COLLECTION:
            raise TypeMismatchError(
                f"tried to iterate over non-array {self._name}",
                context=self._context("iter"),
            )
        return self._iter_items()

    def _iter_items(self) -> Iterator[Tuple[Any, Any]]:
        value = self._value
        items = value.items() if isinstance(value, Mapping) else enumerate(value)
        for key, item in items:
            yield key, self._derive(f"{self._name}[{key}]", item)

    def count(self) -> int:
        """Number of entries; fails for values without a length."""
        if not isinstance(self._value, Sized):
            raise TypeMismatchError(
                f"tried to count non-countable {self._name}",
                context=self._context("count"),
            )
        return len(self._value)

    def __len__(self) -> int:
        return self.count()

    def __bool__(self) -> bool:
        # see class docstring
        return True

    # invocation

    def invoke(self, method_name: str, *args, **kwargs) -> Any:
        """
        Call a method of the wrapped value and wrap its result.

        For datetimes, ``strftime``, ``isoformat`` and ``format`` first
        convert to a time zone: the ``tz`` keyword (or the second
        positional argument of ``strftime``/``format``), else the engine's
        ``_timeZone`` global, else none.
        """
        value = self._value
        result_name = f"{self._name}.{method_name}()"
        if is_datetime(value) and method_name in DATE_FORMAT_METHODS:
            return self._derive(result_name, self._format_datetime(method_name, list(args), kwargs))

        method = getattr(value, method_name, None)
        if method is None:
            raise TypeMismatchError(
                f"{self._name} has no method {method_name}",
                context=self._context("invoke", method=method_name),
            )
        if not callable(method):
            raise NotCallableError(
                f"tried to call non-callable {self._name}.{method_name}",
                context=self._context("invoke", method=method_name),
            )
        return self._derive(result_name, method(*args, **kwargs))

    def _format_datetime(self, method_name: str, args: list, kwargs: dict) -> Any:
        zone = kwargs.pop("tz", None)
        if zone is None and method_name != "isoformat" and len(args) > 1:
            zone = args.pop(1)
        if zone is None and self._engine is not None:
            zone = self._engine.get(TIME_ZONE_VARIABLE)

        value = self._value
        if zone is not None:
            if value.tzinfo is None:
                value = value.replace(tzinfo=datetime.timezone.utc)
            # astimezone returns a new object; the wrapped value is untouched
            value = value.astimezone(resolve_time_zone(zone))
            logger.debug(f"Converted {self._name} to time zone {value.tzinfo} for {method_name}")

        if method_name == "format":
            return format(value, *args)
        return getattr(value, method_name)(*args, **kwargs)

    def __call__(self, *args, **kwargs) -> Any:
        """
        Call the wrapped value itself.

        Raises:
            NotCallableError: If the wrapped value is not callable
        """
        if not callable(self._value):
            raise NotCallableError(
                f"tried to call non-callable {self._name}",
                context=self._context("call"),
            )
        return self._derive(self._name, self._value(*args, **kwargs))

    # inspection

    def get_name(self) -> str:
        return self._name

    def get_value(self) -> Any:
        return self._value

    def get_escape_mode(self) -> EscapeMode:
        return self._escape_mode

    def is_empty(self) -> bool:
        """True for empty collections and strings, zero and False."""
        return not self._value

    def is_true(self) -> bool:
        return bool(self._value)

    # serialization

    @property
    def raw(self) -> str:
        """The raw, unescaped string value."""
        return self.raw_value()

    def raw_value(self) -> str:
        """
        Serialize the wrapped value without escaping.

        Thunks are called, collections become JSON, objects get a debug
        representation, everything else is converted with ``str()``.
        """
        kind = self._kind
        value = self._value
        if kind is ValueKind.THUNK:
            result = value()
            if isinstance(result, EscapedValue):
                return result.raw_value()
            return "" if result is None else str(result)
        if kind is ValueKind.COLLECTION:
            return self.json()
        if kind is ValueKind.OBJECT:
            return pprint.pformat(value)
        if isinstance(value, (bytes, bytearray)):
            return value.decode("utf-8", errors="replace")
        return str(value)

    def json(self, pretty: bool = False) -> str:
        """JSON encoding of the wrapped value; never HTML-escaped."""
        return json.dumps(self._value, indent=4 if pretty else None, default=json_default)

    def escape(self) -> str:
        return html_escape(self.raw_value())

    def __str__(self) -> str:
        mode = self._escape_mode
        if mode == EscapeMode.RAW:
            return self.raw_value()
        if mode == EscapeMode.HTML:
            return self.escape()
        raise UnreachableModeError(
            f"escape type not implemented: {mode}",
            context=self._context("str", mode=mode),
        )

    def __format__(self, format_spec: str) -> str:
        """Support f-strings; a format spec applies to the wrapped value."""
        if not format_spec:
            return str(self)
        text = format(self._value, format_spec)
        if self._escape_mode == EscapeMode.RAW:
            return text
        if self._escape_mode == EscapeMode.HTML:
            return html_escape(text)
        raise UnreachableModeError(
            f"escape type not implemented: {self._escape_mode}",
            context=self._context("format", mode=self._escape_mode),
        )

    def __repr__(self) -> str:
        mode = getattr(self._escape_mode, "value", self._escape_mode)
        return f"EscapedValue({self._name!r}, {self._value!r}, {mode!r})"
