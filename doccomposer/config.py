"""Load composer settings from TOML (e.g. doccomposer.toml).

Config file is looked up in order:
  1. Path in DOCCOMPOSER_CONFIG env var (if set)
  2. doccomposer.toml in the package directory
  3. doccomposer.toml in the current working directory

If no file is found, built-in defaults are used. The file may contain a
``[composer]`` table with the scalar settings and a ``[[fields]]`` array of
``{key, label}`` tables overriding the default member field catalog:

    [composer]
    debounce_seconds = 0.3
    search_limit = 10

    [[fields]]
    key = "first_name"
    label = "Ad"
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from doccomposer.fields import DEFAULT_MEMBER_FIELDS, FieldCatalog, FieldDefinition

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DOCCOMPOSER_CONFIG"
CONFIG_FILE_NAME = "doccomposer.toml"

DEFAULT_DEBOUNCE_SECONDS = 0.5
DEFAULT_SEARCH_LIMIT = 20
DEFAULT_MAX_FIELDS = 5


class ComposerConfig(BaseModel):
    """Settings for the mention engine, lookup debouncing and preview rendering.

    Attributes:
        debounce_seconds: Quiet period after the last keystroke before a lookup is issued.
        search_limit: Maximum number of records requested per lookup.
        max_fields: Maximum number of fields selectable into one table; may
            lower the five-field cap but never raise it.
        min_query_length: Queries shorter than this do not hit the gateway.
        min_font_size: Lower bound applied to ``[[SIZE=n]]`` when rendering.
        max_font_size: Upper bound applied to ``[[SIZE=n]]`` when rendering.
        lookup_timeout: HTTP timeout for remote lookup adapters, in seconds.
        fields: Selectable field catalog.
    """

    model_config = {"frozen": True}

    debounce_seconds: float = Field(DEFAULT_DEBOUNCE_SECONDS, ge=0.0, description="Lookup debounce delay in seconds")
    search_limit: int = Field(DEFAULT_SEARCH_LIMIT, gt=0, description="Maximum records per lookup")
    max_fields: int = Field(
        DEFAULT_MAX_FIELDS, gt=0, le=DEFAULT_MAX_FIELDS, description="Maximum fields per generated table"
    )
    min_query_length: int = Field(0, ge=0, description="Shortest query sent to the gateway")
    min_font_size: int = Field(8, gt=0, description="Smallest rendered font size (pt)")
    max_font_size: int = Field(24, gt=0, description="Largest rendered font size (pt)")
    lookup_timeout: float = Field(10.0, gt=0.0, description="Remote lookup timeout in seconds")
    fields: FieldCatalog = Field(default=DEFAULT_MEMBER_FIELDS, description="Selectable field catalog")

    @model_validator(mode="after")
    def font_bounds_are_ordered(self) -> "ComposerConfig":
        if self.min_font_size > self.max_font_size:
            raise ValueError("min_font_size must be <= max_font_size")
        return self

    def clamp_font_size(self, size: int) -> int:
        return min(self.max_font_size, max(self.min_font_size, size))


def _default_config_paths() -> list[Path]:
    """Return paths to check for doccomposer.toml (first existing wins)."""
    paths: list[Path] = []
    if os.environ.get(CONFIG_ENV_VAR):
        paths.append(Path(os.environ[CONFIG_ENV_VAR]))
    paths.append(Path(__file__).resolve().parent / CONFIG_FILE_NAME)
    paths.append(Path.cwd() / CONFIG_FILE_NAME)
    return paths


def config_from_mapping(data: dict[str, Any]) -> ComposerConfig:
    """Build a config from parsed TOML data.

    Raises:
        pydantic.ValidationError: If a value has the wrong type or range.
    """
    settings: dict[str, Any] = dict(data.get("composer") or {})
    raw_fields = data.get("fields")
    if isinstance(raw_fields, list) and raw_fields:
        settings["fields"] = FieldCatalog(fields=tuple(FieldDefinition(**entry) for entry in raw_fields))
    return ComposerConfig(**settings)


def load_composer_config(path: Path | str | None = None) -> ComposerConfig:
    """Load composer config from a TOML file.

    Args:
        path: Explicit file to read. When omitted the default locations are
            searched and the first existing file wins.

    Returns:
        The parsed config, or the defaults if no readable file was found.
        Files that cannot be read or parsed are skipped with a warning.
    """
    candidates = [Path(path)] if path is not None else _default_config_paths()
    for candidate in candidates:
        if not candidate.is_file():
            continue
        try:
            with open(candidate, "rb") as f:
                data = tomllib.load(f)
            config = config_from_mapping(data)
        except (OSError, tomllib.TOMLDecodeError, ValidationError, TypeError) as e:
            logger.warning(f"Ignoring unreadable composer config {candidate}: {e}")
            continue
        logger.debug(f"Loaded composer config from {candidate}")
        return config
    return ComposerConfig()
