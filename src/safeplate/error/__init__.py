"""
Exceptions raised by the engine and its template variables.
"""
from .exceptions import (
    ErrorContext,
    SafeplateError,
    ConfigurationError,
    TemplateError,
    TemplateNotFoundError,
    ReadOnlyViolationError,
    TypeMismatchError,
    MissingAttributeError,
    NotCallableError,
    ShapeMismatchError,
    InvalidOptionError,
    UnreachableModeError,
    RenderStateError,
    RecursionDepthError,
)

__all__ = [
    'ErrorContext',
    'SafeplateError',
    'ConfigurationError',
    'TemplateError',
    'TemplateNotFoundError',
    'ReadOnlyViolationError',
    'TypeMismatchError',
    'MissingAttributeError',
    'NotCallableError',
    'ShapeMismatchError',
    'InvalidOptionError',
    'UnreachableModeError',
    'RenderStateError',
    'RecursionDepthError',
]
