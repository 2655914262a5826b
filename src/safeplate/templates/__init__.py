"""
Template source resolution and compiled body caching.
"""

from .resolver import TemplateResolver, TemplateSource
from .cache import TemplateCache, compile_template

__all__ = [
    'TemplateResolver',
    'TemplateSource',
    'TemplateCache',
    'compile_template',
]
