# src/uploadcache/core/config.py
"""Configuration for the upload cache.

Settings are pydantic models: validated once, frozen afterwards. The
storage mechanism is a discriminated union so an unrecognised selection
fails at validation time instead of when the store is first touched.
"""

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_FILE_NAME = "db.sqlite"
DEFAULT_CACHE_DAYS_LIMIT = 7
DEFAULT_CACHE_SIZE_LIMIT = 90 * 1024 * 1024


class InMemoryStorage(BaseModel):
    """Transient store living only as long as a handle is open.

    Handles opened with the same name in one process share the data.
    """

    model_config = {"frozen": True}

    kind: Literal["in_memory"] = "in_memory"
    name: str = Field(min_length=1, description="Name of the shared in-memory database")

    @field_validator("name")
    @classmethod
    def _reject_separators(cls, v: str) -> str:
        # The name is embedded in a SQLite URI path segment
        if any(ch in v for ch in "?#&/"):
            raise ValueError(f"in-memory store name may not contain '?', '#', '&' or '/', got {v!r}")
        return v


class OnDiskStorage(BaseModel):
    """Persistent store kept in a SQLite file under base_path."""

    model_config = {"frozen": True}

    kind: Literal["on_disk"] = "on_disk"
    base_path: Path = Field(description="Directory holding the store file (created if missing)")
    file_name: str = Field(default=DEFAULT_FILE_NAME, min_length=1, description="Store file name")

    @property
    def file_path(self) -> Path:
        """Full path of the store file."""
        return self.base_path / self.file_name


StorageSettings = Annotated[InMemoryStorage | OnDiskStorage, Field(discriminator="kind")]


class CacheSettings(BaseModel):
    """Upload cache configuration.

    A limit of 0 disables the matching policy ("unlimited"), it never means
    "keep nothing".
    """

    model_config = {"frozen": True}

    storage: StorageSettings = Field(
        default_factory=lambda: OnDiskStorage(base_path=Path(".uploadcache")),
        description="Where the store lives",
    )
    cache_days_limit: int = Field(
        default=DEFAULT_CACHE_DAYS_LIMIT,
        ge=0,
        description="Evict records created this many calendar days ago or earlier (0 disables)",
    )
    cache_size_limit: int = Field(
        default=DEFAULT_CACHE_SIZE_LIMIT,
        ge=0,
        description="Total payload bytes to keep, newest first (0 disables)",
    )
    cache_limit: int = Field(
        default=0,
        ge=0,
        description="Maximum row count enforced on insert (0 disables)",
    )

    @classmethod
    def in_memory(cls, name: str, **limits: int) -> "CacheSettings":
        """Convenience constructor for a named in-memory store."""
        return cls(storage=InMemoryStorage(name=name), **limits)

    @classmethod
    def on_disk(cls, base_path: Path, **limits: int) -> "CacheSettings":
        """Convenience constructor for an on-disk store under base_path."""
        return cls(storage=OnDiskStorage(base_path=base_path), **limits)


def _lower_keys(value: Any) -> Any:
    """Recursively lowercase mapping keys (Dynaconf upper-cases them)."""
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def load_settings(config_path: Path) -> CacheSettings:
    """Load settings from a YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (UPLOADCACHE_*) - highest priority
    2. Config file
    3. Defaults from the pydantic schema - lowest priority

    Nested keys use a double underscore, e.g.
    UPLOADCACHE_STORAGE__BASE_PATH=/var/cache/uploads.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated CacheSettings instance

    Raises:
        ValidationError: If configuration fails pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="UPLOADCACHE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return CacheSettings(**_lower_keys(raw_config))
