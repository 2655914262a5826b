"""
safeplate: Python template bodies with escape-by-default variables.
"""
from .engine import Engine, RenderResult
from .error.exceptions import (
    SafeplateError,
    TemplateError,
    TemplateNotFoundError,
    ReadOnlyViolationError,
)
from .variables import EscapeMode, EscapedValue, html_escape

__version__ = "0.1.0"

__all__ = [
    'Engine',
    'RenderResult',
    'EscapeMode',
    'EscapedValue',
    'html_escape',
    'SafeplateError',
    'TemplateError',
    'TemplateNotFoundError',
    'ReadOnlyViolationError',
    '__version__',
]
