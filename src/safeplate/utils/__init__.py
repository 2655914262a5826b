"""
Utility helpers.
"""
from .logging import JsonFormatter, TemplateLoggerAdapter, configure_logging, get_logger

__all__ = [
    'JsonFormatter',
    'TemplateLoggerAdapter',
    'configure_logging',
    'get_logger',
]
