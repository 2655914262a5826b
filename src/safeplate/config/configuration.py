"""
Configuration management for the template engine.
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator, model_validator

from ..error.exceptions import ConfigurationError, ErrorContext
from ..variables.escape import EscapeMode

logger = logging.getLogger(__name__)

class SuffixRule(BaseModel):
    """A template file suffix and the escape mode it selects."""

    suffix: str
    mode: EscapeMode

    @field_validator("suffix")
    @classmethod
    def validate_suffix(cls, value: str) -> str:
        """Validate suffix."""
        if not value.startswith("."):
            raise ValueError(f"Invalid suffix '{value}'. Suffixes must start with '.'")
        return value

# first existing match wins
DEFAULT_SUFFIXES = [
    SuffixRule(suffix=".py", mode=EscapeMode.HTML),
    SuffixRule(suffix=".tpl.py", mode=EscapeMode.HTML),
    SuffixRule(suffix=".txt.py", mode=EscapeMode.RAW),
]

# each nesting level costs several interpreter frames; deeper limits hit RecursionError first
MAX_NESTING_DEPTH = 100

class EngineConfiguration(BaseModel):
    """Configuration for a template engine."""

    template_dirs: List[Path] = Field(
        default_factory=lambda: [Path("./templates")],
        description="Template directories, searched in order"
    )
    suffixes: List[SuffixRule] = Field(
        default_factory=lambda: [rule.model_copy() for rule in DEFAULT_SUFFIXES],
        description="Suffix conventions, first existing match wins"
    )
    encoding: str = Field(default="utf-8", description="Template source encoding")
    max_depth: int = Field(
        default=64, description="Maximum extends/include nesting", ge=1, le=MAX_NESTING_DEPTH
    )
    cache_enabled: bool = Field(default=True, description="Cache compiled template bodies")
    cache_size: int = Field(default=128, description="Maximum number of cached bodies", ge=1)

    log_level: str = "INFO"
    log_file: Optional[str] = None
    structured_logging: bool = False

    globals: Dict[str, Any] = Field(
        default_factory=dict,
        description="Global variables seeded at engine construction, e.g. _timeZone"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        value_upper = value.upper()
        if value_upper not in valid_levels:
            raise ValueError(f"Invalid log level '{value}'. Must be one of: {valid_levels}")
        return value_upper

    @field_validator("template_dirs", mode="before")
    @classmethod
    def convert_path_list(cls, value: Any) -> List[Path]:
        """Convert path strings in lists to Path objects."""
        if isinstance(value, (str, Path)):
            value = [value]
        if not isinstance(value, list):
            raise ValueError("template_dirs must be a list")
        return [Path(v).resolve() if isinstance(v, (str, Path)) else v for v in value]

    @field_validator("suffixes")
    @classmethod
    def validate_suffixes(cls, value: List[SuffixRule]) -> List[SuffixRule]:
        """At least one suffix, no duplicates."""
        if not value:
            raise ValueError("At least one template suffix is required")
        seen = set()
        for rule in value:
            if rule.suffix in seen:
                raise ValueError(f"Duplicate template suffix '{rule.suffix}'")
            seen.add(rule.suffix)
        return value

    @model_validator(mode="before")
    @classmethod
    def resolve_workspace_paths(cls, values: Any) -> Any:
        """Resolve ${WORKSPACE_ROOT} in template directories."""
        if not isinstance(values, dict) or "template_dirs" not in values:
            return values
        workspace_root = os.environ.get("WORKSPACE_ROOT", os.getcwd())
        dirs = values["template_dirs"]
        if isinstance(dirs, (str, Path)):
            dirs = [dirs]
        values = dict(values)
        values["template_dirs"] = [
            item.replace("${WORKSPACE_ROOT}", workspace_root) if isinstance(item, str) else item
            for item in dirs
        ]
        return values

    @model_validator(mode="after")
    def warn_missing_dirs(self, info: ValidationInfo) -> "EngineConfiguration":
        """
        Template directories are not created; warn when one is missing.

        Skipped when the validation context sets ``check_template_dirs`` to
        False, e.g. for an engine with its own resolver.
        """
        if info.context and not info.context.get("check_template_dirs", True):
            return self
        for path in self.template_dirs:
            if not path.is_dir():
                logger.warning(f"Template directory not found: {path}")
        return self

def load_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load configuration from a YAML file."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Error loading config file {config_path}: {e}",
            context=ErrorContext("config", "load_config_file", path=str(config_path)),
        ) from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    # allow the settings to live under a top-level "safeplate" key
    return data.get("safeplate", data)

def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two configuration dicts; nested dicts are merged, everything else replaced."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged

def ensure_engine_config(
    config: Union[None, Dict[str, Any], str, Path, EngineConfiguration] = None,
    *,
    check_template_dirs: bool = True,
    **overrides: Any
) -> EngineConfiguration:
    """
    Build an EngineConfiguration from any supported source.

    Args:
        config: None, a dict, a YAML file path or an existing configuration
        check_template_dirs: Warn about missing template directories
        **overrides: Settings applied on top of the source

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the settings do not validate
    """
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if isinstance(config, EngineConfiguration):
        if not overrides:
            return config
        data = config.model_dump()
    elif isinstance(config, (str, Path)):
        data = load_config_file(config)
    elif config is None:
        data = {}
    elif isinstance(config, dict):
        data = config
    else:
        raise ConfigurationError(f"Unsupported configuration source: {type(config).__name__}")

    data = merge_configs(data, overrides)
    try:
        return EngineConfiguration.model_validate(
            data, context={"check_template_dirs": check_template_dirs}
        )
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid engine configuration: {e}",
            context=ErrorContext("config", "ensure_engine_config"),
        ) from e
