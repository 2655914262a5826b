"""
Template variables: escaping proxies around the values a template reads.
"""
from .escape import EscapeMode, html_escape
from .kinds import ValueKind, classify
from .value import EscapedValue, resolve_time_zone
from .widgets import html_attributes

__all__ = [
    'EscapeMode',
    'EscapedValue',
    'ValueKind',
    'classify',
    'html_escape',
    'html_attributes',
    'resolve_time_zone',
]
