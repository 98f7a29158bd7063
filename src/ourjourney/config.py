"""Central Configuration System for Our Journey.

This module is the single source of truth for application configuration.
Every other module that needs settings imports from here.

The configuration system supports:
- Multi-source configuration (environment variables > config file > defaults)
- Nested sections with ``OURJOURNEY_<SECTION>__<FIELD>`` environment overrides
- Graceful degradation when the config file is missing or malformed

Example:
    >>> from ourjourney.config import get_config
    >>>
    >>> cfg = get_config()
    >>> cfg.parsing.year_pivot
    50

Config File Format (YAML):
    ```yaml
    parsing:
      year_pivot: 50        # two-digit years below this are 20xx
      strip_headers: true   # trim whitespace around column names
      collect_warnings: true

    paths:
      upload_dir: ./uploads
      log_file: ~/.ourjourney/ourjourney.log

    cache:
      enabled: true
      max_entries: 8

    log_level: WARNING
    ```
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Exception raised for YAML config file issues.

    Raised when an explicitly requested config file does not exist or cannot
    be read. Files found by searching default locations never raise; they log
    a warning and fall back to defaults.
    """

    pass


# =============================================================================
# Configuration Sections
# =============================================================================


class ParsingConfig(BaseModel):
    """Options that change how memories sheets are parsed.

    Attributes:
        year_pivot: Two-digit years below this map to 20xx, the rest to 19xx.
        strip_headers: Trim whitespace around column names.
        collect_warnings: Record field-level warnings during ingest.
    """

    year_pivot: int = Field(
        default=50,
        ge=0,
        le=100,
        description="Two-digit year pivot for D/M/YY dates.",
    )
    strip_headers: bool = Field(default=True, description="Trim column names.")
    collect_warnings: bool = Field(default=True, description="Record field warnings.")


class PathsConfig(BaseModel):
    """Filesystem locations.

    Attributes:
        upload_dir: Where the memories sheet and media files are stored.
        log_file: Optional log file path.
    """

    upload_dir: Path = Field(default=Path("./uploads"))
    log_file: Path | None = None

    @field_validator("upload_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Any:
        """Expand ``~`` in string and Path values."""
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        return v


class CacheConfig(BaseModel):
    """Ingest cache settings.

    Attributes:
        enabled: Keep parsed results between requests.
        max_entries: Number of parsed sheets to keep.
    """

    enabled: bool = True
    max_entries: int = Field(default=8, ge=1)


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Configuration priority (highest wins):
    1. Environment variables (OURJOURNEY_*)
    2. Config file (YAML)
    3. In-code defaults

    Attributes:
        parsing: Sheet parsing options.
        paths: Filesystem locations.
        cache: Ingest cache settings.
        log_level: Default log level for the CLI.
    """

    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    log_level: str = Field(default="WARNING", description="DEBUG, INFO, WARNING or ERROR.")

    model_config = {
        "env_prefix": "OURJOURNEY_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


# =============================================================================
# Loading
# =============================================================================


DEFAULT_SEARCH_PATHS: tuple[Path, ...] = (
    Path("./ourjourney.yaml"),
    Path("./ourjourney.yml"),
    Path.home() / ".ourjourney" / "config.yaml",
)


def _read_config_file(config_file: Path) -> dict[str, Any]:
    """Read a YAML config file, returning {} when it is unusable."""
    try:
        content = config_file.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"Failed to read config file {config_file}: {type(e).__name__}. Using defaults.")
        return {}

    if not content.strip():
        return {}

    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse config file {config_file}: {e}. Using defaults.")
        return {}

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        logger.warning(f"Config file {config_file} has unexpected format. Using defaults.")
        return {}
    return loaded


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from file, environment, and defaults.

    Environment variables override file values section by section, so
    ``OURJOURNEY_PARSING__YEAR_PIVOT=30`` wins over ``parsing.year_pivot`` in
    the YAML file.

    Args:
        path: Optional config file. If None, searches default locations.

    Returns:
        Fully-populated AppConfig instance.

    Raises:
        ConfigFileError: If ``path`` is given but does not exist.
        ConfigError: If an environment variable holds an invalid value.

    Example:
        >>> config = load_config()
        >>> config = load_config(Path("./ourjourney.yaml"))
    """
    if path is not None and not path.exists():
        raise ConfigFileError(f"Config file not found: {path}")

    config_file = path
    if config_file is None:
        config_file = next((p for p in DEFAULT_SEARCH_PATHS if p.exists()), None)

    config_data = _read_config_file(config_file) if config_file is not None else {}
    if config_file is not None:
        logger.debug(f"Loaded config file {config_file}")

    try:
        env_config = AppConfig()
    except ValidationError as e:
        raise ConfigError(f"Invalid OURJOURNEY_* environment variable: {e}") from e
    env_overrides = env_config.model_dump(exclude_defaults=True)

    merged = _deep_merge(config_data, env_overrides)
    try:
        return AppConfig.model_validate(merged)
    except ValidationError as e:
        logger.warning(f"Error parsing config values: {e}. Using defaults.")
        return env_config


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@functools.lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the cached configuration singleton.

    Returns:
        Cached AppConfig instance.
    """
    return load_config()


def reset_config() -> None:
    """Clear the configuration cache (used by tests)."""
    get_config.cache_clear()
