"""
Configuration components for the template engine.
"""
import os
from typing import Optional

from .configuration import (
    DEFAULT_SUFFIXES,
    MAX_NESTING_DEPTH,
    EngineConfiguration,
    SuffixRule,
    ensure_engine_config,
    load_config_file,
    merge_configs,
)

def find_default_config() -> Optional[str]:
    """Find the default configuration file."""
    default_paths = [
        "./safeplate.yaml",
        "./config/safeplate.yaml",
        os.path.expanduser("~/.safeplate/config.yaml"),
    ]
    for path in default_paths:
        if os.path.exists(path):
            return path
    return None

__all__ = [
    "DEFAULT_SUFFIXES",
    "MAX_NESTING_DEPTH",
    "EngineConfiguration",
    "SuffixRule",
    "ensure_engine_config",
    "load_config_file",
    "merge_configs",
    "find_default_config",
]
