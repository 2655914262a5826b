"""
Cache of compiled template bodies.
"""
import logging
import re
import time
from types import CodeType
from typing import Callable, Dict, Optional, Tuple

from .resolver import TemplateSource

logger = logging.getLogger(__name__)

class TemplateCache:
    """
    Least-recently-used cache of compiled template bodies.

    Entries are dropped when the loader reports that their source changed.
    """

    def __init__(self, max_size: int = 128):
        """
        Initialize template cache.

        Args:
            max_size: Maximum number of compiled bodies in cache
        """
        self.cache: Dict[str, Tuple[CodeType, Optional[Callable[[], bool]]]] = {}
        self.max_size = max_size
        self.access_times: Dict[str, float] = {}

    def get(self, key: str) -> Optional[CodeType]:
        """
        Get a compiled body by key.

        Args:
            key: Cache key

        Returns:
            Compiled body or None if not found/outdated
        """
        if key not in self.cache:
            return None

        code, uptodate = self.cache[key]
        if uptodate is not None and not uptodate():
            logger.debug(f"Template source changed, dropping cached body: {key}")
            del self.cache[key]
            del self.access_times[key]
            return None

        self.access_times[key] = time.monotonic()
        return code

    def set(self, key: str, code: CodeType, uptodate: Optional[Callable[[], bool]] = None) -> None:
        """
        Add a compiled body to the cache.

        Args:
            key: Cache key
            code: Compiled body
            uptodate: Loader callback telling whether the source is unchanged
        """
        if len(self.cache) >= self.max_size and key not in self.cache:
            # Remove least recently used item
            lru_key = min(self.access_times, key=self.access_times.get)
            del self.cache[lru_key]
            del self.access_times[lru_key]

        self.cache[key] = (code, uptodate)
        self.access_times[key] = time.monotonic()

    def get_or_compile(self, template: TemplateSource) -> CodeType:
        """
        Return the compiled body of a resolved template, compiling on a miss.

        Raises:
            SyntaxError: If the template body is not valid Python
        """
        key = template.filename or template.source_name
        code = self.get(key)
        if code is not None:
            logger.debug(f"Using cached template body: {key}")
            return code

        code = compile_template(template)
        self.set(key, code, template.uptodate)
        return code

    def invalidate(self, pattern: str = None) -> None:
        """
        Invalidate cache entries matching a pattern.

        Args:
            pattern: Regex pattern to match against keys
        """
        if pattern:
            regex = re.compile(pattern)
            keys_to_remove = [key for key in self.cache if regex.search(key)]
            for key in keys_to_remove:
                del self.cache[key]
                del self.access_times[key]

            logger.debug(f"Invalidated {len(keys_to_remove)} cache entries matching pattern '{pattern}'")
        else:
            self.cache.clear()
            self.access_times.clear()
            logger.debug("Invalidated entire template cache")

    def __len__(self) -> int:
        return len(self.cache)

def compile_template(template: TemplateSource) -> CodeType:
    """Compile a template body to a code object."""
    filename = template.filename or f"<template {template.source_name}>"
    logger.debug(f"Compiling template body: {filename}")
    return compile(template.source, filename, "exec")
