# tests/core/test_config.py
"""Tests for upload cache configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError


class TestCacheSettings:
    """CacheSettings validation."""

    def test_defaults(self) -> None:
        from uploadcache.core.config import (
            DEFAULT_CACHE_DAYS_LIMIT,
            DEFAULT_CACHE_SIZE_LIMIT,
            CacheSettings,
            OnDiskStorage,
        )

        settings = CacheSettings()

        assert isinstance(settings.storage, OnDiskStorage)
        assert settings.cache_days_limit == DEFAULT_CACHE_DAYS_LIMIT
        assert settings.cache_size_limit == DEFAULT_CACHE_SIZE_LIMIT
        assert settings.cache_limit == 0

    def test_negative_limits_rejected(self) -> None:
        from uploadcache.core.config import CacheSettings

        for field in ("cache_days_limit", "cache_size_limit", "cache_limit"):
            with pytest.raises(ValidationError):
                CacheSettings(**{field: -1})

    def test_frozen(self) -> None:
        from uploadcache.core.config import CacheSettings

        settings = CacheSettings()
        with pytest.raises(ValidationError):
            settings.cache_limit = 5  # type: ignore[misc]

    def test_storage_from_dict_in_memory(self) -> None:
        from uploadcache.core.config import CacheSettings, InMemoryStorage

        settings = CacheSettings(storage={"kind": "in_memory", "name": "uploads"})

        assert settings.storage == InMemoryStorage(name="uploads")

    def test_storage_from_dict_on_disk(self, tmp_path: Path) -> None:
        from uploadcache.core.config import CacheSettings, OnDiskStorage

        settings = CacheSettings(storage={"kind": "on_disk", "base_path": str(tmp_path)})

        assert isinstance(settings.storage, OnDiskStorage)
        assert settings.storage.file_path == tmp_path / "db.sqlite"

    def test_unsupported_storage_kind_rejected(self) -> None:
        from uploadcache.core.config import CacheSettings

        with pytest.raises(ValidationError):
            CacheSettings(storage={"kind": "s3", "bucket": "uploads"})

    def test_in_memory_name_required(self) -> None:
        from uploadcache.core.config import InMemoryStorage

        with pytest.raises(ValidationError):
            InMemoryStorage(name="")

    def test_in_memory_name_rejects_uri_characters(self) -> None:
        from uploadcache.core.config import InMemoryStorage

        with pytest.raises(ValidationError):
            InMemoryStorage(name="a?mode=rw")

    def test_convenience_constructors(self, tmp_path: Path) -> None:
        from uploadcache.core.config import CacheSettings, InMemoryStorage, OnDiskStorage

        memory = CacheSettings.in_memory("x", cache_limit=3)
        disk = CacheSettings.on_disk(tmp_path, cache_days_limit=0)

        assert memory.storage == InMemoryStorage(name="x")
        assert memory.cache_limit == 3
        assert disk.storage == OnDiskStorage(base_path=tmp_path)
        assert disk.cache_days_limit == 0


class TestLoadSettings:
    """YAML + environment loading via Dynaconf."""

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        from uploadcache.core.config import load_settings

        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_loads_yaml(self, tmp_path: Path) -> None:
        from uploadcache.core.config import OnDiskStorage, load_settings

        config_file = tmp_path / "cache.yaml"
        config_file.write_text(
            "storage:\n"
            "  kind: on_disk\n"
            f"  base_path: {tmp_path / 'store'}\n"
            "  file_name: uploads.sqlite\n"
            "cache_days_limit: 3\n"
            "cache_size_limit: 1000\n"
            "cache_limit: 50\n"
        )

        settings = load_settings(config_file)

        assert settings.storage == OnDiskStorage(base_path=tmp_path / "store", file_name="uploads.sqlite")
        assert settings.cache_days_limit == 3
        assert settings.cache_size_limit == 1000
        assert settings.cache_limit == 50

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from uploadcache.core.config import load_settings

        config_file = tmp_path / "cache.yaml"
        config_file.write_text("storage:\n  kind: in_memory\n  name: uploads\ncache_limit: 50\n")
        monkeypatch.setenv("UPLOADCACHE_CACHE_LIMIT", "10")

        settings = load_settings(config_file)

        assert settings.cache_limit == 10

    def test_invalid_values_fail_validation(self, tmp_path: Path) -> None:
        from uploadcache.core.config import load_settings

        config_file = tmp_path / "cache.yaml"
        config_file.write_text("cache_size_limit: -5\n")

        with pytest.raises(ValidationError):
            load_settings(config_file)
