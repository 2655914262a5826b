"""
HTML builders available on every template variable.

The builders always emit HTML, so every interpolated value is escaped
with ``html_escape`` whatever the escape mode of the variable.
"""
import datetime
import re
from collections.abc import Mapping
from typing import Any, Dict

from ..error.exceptions import ErrorContext, InvalidOptionError, ShapeMismatchError
from .escape import html_escape
from .kinds import ValueKind, is_sequence

LIST_TYPES = ("ol", "ul", "table", "")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def attribute_name(key: str) -> str:
    """``class_`` -> ``class``, ``data_toggle``/``dataToggle`` -> ``data-toggle``."""
    key = key.rstrip("_")
    key = _CAMEL_BOUNDARY.sub("-", key)
    return key.replace("_", "-").lower()


def html_attributes(attributes: Mapping) -> str:
    """
    Render an attribute bag.

    ``True`` renders a bare attribute, ``False`` and ``None`` omit it.
    Every rendered attribute is preceded by a space.
    """
    parts = []
    for key, value in attributes.items():
        if value is False or value is None:
            continue
        name = attribute_name(key)
        if value is True:
            parts.append(f" {name}")
        else:
            parts.append(f' {name}="{html_escape(value)}"')
    return "".join(parts)


def _attribute_bag(attributes: Mapping) -> Dict[str, Any]:
    return {attribute_name(key): value for key, value in attributes.items()}


def _fill(attributes: Dict[str, Any], key: str, default: Any) -> None:
    if attributes.get(key) is None:
        attributes[key] = default


def _same_form_value(left: Any, right: Any) -> bool:
    # form values arrive as strings; 1 and "1" select the same option
    if left is None or right is None:
        return left is right
    return left == right or str(left) == str(right)


class HtmlWidgetsMixin:
    """Table, list and form control builders over ``self._value``."""

    __slots__ = ()

    def _label(self, attributes: Dict[str, Any], placeholder: bool) -> str:
        label = attributes.pop("label", None)
        if label is None:
            return ""
        if placeholder:
            _fill(attributes, "placeholder", label)
        _fill(attributes, "id", self._name)
        return f'<label for="{html_escape(attributes["id"])}">{html_escape(label)}</label>'

    def html_table(self) -> str:
        """
        HTML table of a list of rows.

        Rows are mappings or sequences; the header comes from the keys
        of the first row.

        Raises:
            ShapeMismatchError: If the value is not a list of rows
        """
        rows = self._value
        if not rows:
            return ""
        if isinstance(rows, Mapping):
            rows = list(rows.values())
        elif self._kind is ValueKind.COLLECTION:
            rows = list(rows)
        if not isinstance(rows, list) or not all(isinstance(row, Mapping) or is_sequence(row) for row in rows):
            raise ShapeMismatchError(
                f"{self._name} is not a two-dimensional array",
                context=ErrorContext("EscapedValue", "html_table", variable=self._name),
            )

        first = rows[0]
        header = first.keys() if isinstance(first, Mapping) else range(len(first))
        html = "<tr>" + "".join(f"<th>{html_escape(key)}</th>" for key in header) + "</tr>\n"
        for row in rows:
            cells = row.values() if isinstance(row, Mapping) else row
            html += "<tr>" + "".join(f"<td>{html_escape(cell)}</td>" for cell in cells) + "</tr>\n"
        return f"<table>\n{html}\n</table>\n"

    def html_list(self, list_type: str = "ol") -> str:
        """
        HTML list of a one-dimensional collection.

        Args:
            list_type: 'ol', 'ul', 'table' or '' (items without a list tag)

        Raises:
            InvalidOptionError: For any other list type
            ShapeMismatchError: If the value is not a collection
        """
        if list_type not in LIST_TYPES:
            raise InvalidOptionError(
                f"invalid list type: {list_type}",
                context=ErrorContext("EscapedValue", "html_list", variable=self._name),
            )
        items = self._value
        if not items:
            return ""
        if self._kind is not ValueKind.COLLECTION:
            raise ShapeMismatchError(
                f"{self._name} is not an array",
                context=ErrorContext("EscapedValue", "html_list", variable=self._name),
            )

        if list_type == "table":
            open_tag, close_tag = "<tr><td>", "</td></tr>"
        else:
            open_tag, close_tag = "<li>", "</li>"
        values = items.values() if isinstance(items, Mapping) else items
        html = "".join(f"{open_tag}{html_escape(value)}{close_tag}\n" for value in values)

        if list_type in ("ol", "ul"):
            return f"<{list_type}>\n{html}</{list_type}>\n"
        if list_type == "table":
            return f"<table>\n<tr><th>{html_escape(self._name)}</th></tr>\n{html}</table>\n"
        return html

    def dump(self) -> str:
        return f"<pre>{self.escape()}</pre>"

    def implode(self, separator: str = ", ") -> str:
        """Join the items, each stringified in the variable's own escape mode."""
        return separator.join("" if item is None else str(item) for _, item in self)

    def input_hidden(self, name: str = "") -> str:
        return f'<input type="hidden" name="{html_escape(name or self._name)}" value="{self.escape()}">'

    def input(self, **attributes) -> str:
        """
        ``<input>`` bound to this variable.

        Defaults: type 'text' (omitted from the markup), name of the
        variable, its value and class 'form-control'. A ``label``
        renders a ``<label>`` and fills ``placeholder`` and ``id``.
        """
        attributes = _attribute_bag(attributes)
        _fill(attributes, "type", "text")
        _fill(attributes, "name", self._name)
        _fill(attributes, "value", self._value)
        _fill(attributes, "class", "form-control")

        if attributes["type"] == "text":
            del attributes["type"]
        elif attributes["type"] == "date":
            if not attributes["value"]:
                attributes["value"] = "0000-00-00"
            elif isinstance(attributes["value"], datetime.date):
                attributes["value"] = attributes["value"].strftime("%Y-%m-%d")

        label = self._label(attributes, placeholder=True)
        return f"{label}<input{html_attributes(attributes)}>"

    def box(self, **attributes) -> str:
        """Checkbox (checked when the value is truthy) or radio button."""
        attributes = _attribute_bag(attributes)
        _fill(attributes, "type", "checkbox")
        _fill(attributes, "name", self._name)
        label = attributes.pop("label", None)
        if label is None:
            label = self._name

        if attributes["type"] == "checkbox":
            _fill(attributes, "checked", bool(self._value))
        elif attributes["type"] == "radio":
            _fill(attributes, "value", self._value)
            _fill(attributes, "checked", _same_form_value(attributes["value"], self._value))

        box = f"<input{html_attributes(attributes)}>"
        return f"<label>{box} {html_escape(label)}</label>" if label else box

    def textarea(self, **attributes) -> str:
        attributes = _attribute_bag(attributes)
        _fill(attributes, "name", self._name)
        _fill(attributes, "class", "form-control")
        label = self._label(attributes, placeholder=True)
        return f"{label}<textarea{html_attributes(attributes)}>{self.escape()}</textarea>"

    def select(self, options: Any, **attributes) -> str:
        """
        ``<select>`` with the option matching this variable's value selected.

        Args:
            options: Mapping of option value to label, or a sequence of
                values used as their own labels
        """
        attributes = _attribute_bag(attributes)
        _fill(attributes, "name", self._name)
        label = self._label(attributes, placeholder=False)
        selected = attributes.pop("value", None)
        if selected is None:
            selected = self._value

        if isinstance(options, HtmlWidgetsMixin):
            options = options.get_value()
        pairs = options.items() if isinstance(options, Mapping) else ((option, option) for option in options)
        html = "".join(
            f'<option value="{html_escape(key)}"{" selected" if _same_form_value(selected, key) else ""}>'
            f"{html_escape(text)}</option>"
            for key, text in pairs
        )
        return f"{label}<select{html_attributes(attributes)}>{html}</select>"
