"""Tests for application configuration and settings.

This module contains unit tests for the Settings Pydantic model and
application configuration logic in school_directory.core.config. It
ensures that default values, the DB_* environment aliases, directory
creation logic, connection keyword arguments and get_settings caching
work as expected.

Temporary directories are used to verify filesystem interactions.
"""

from __future__ import annotations

import pathlib

import pytest

from school_directory.core import config


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that Settings has expected default values."""
    for name in ("DB_HOST", "DB_USER", "DB_PASS", "DB_NAME", "DB_PORT"):
        monkeypatch.delenv(name, raising=False)
    settings = config.Settings(_env_file=None)  # type: ignore[call-arg]
    assert settings.db_host == "localhost"
    assert settings.db_user == "root"
    assert settings.db_password == ""
    assert settings.db_name == "assignment"
    assert settings.db_port == 3306
    assert settings.image_url_prefix == "/schoolImages"
    assert settings.max_upload_size_bytes == 5 * 1024 * 1024
    assert settings.allow_origins == ["*"]


def test_settings_reads_db_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that the short DB_* variable names are honoured."""
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_USER", "registrar")
    monkeypatch.setenv("DB_PASS", "s3cret")
    monkeypatch.setenv("DB_NAME", "schools")
    monkeypatch.setenv("DB_PORT", "5432")
    settings = config.Settings()
    assert settings.db_host == "db.internal"
    assert settings.db_user == "registrar"
    assert settings.db_password == "s3cret"
    assert settings.db_name == "schools"
    assert settings.db_port == 5432


def test_connection_kwargs_include_timeouts() -> None:
    """Test that connect arguments carry both timeouts."""
    settings = config.Settings(
        db_host="h",
        db_port=5433,
        db_connect_timeout_seconds=3,
        db_statement_timeout_ms=1500,
    )
    kwargs = settings.connection_kwargs()
    assert kwargs["host"] == "h"
    assert kwargs["port"] == 5433
    assert kwargs["connect_timeout"] == 3
    assert kwargs["options"] == "-c statement_timeout=1500"


def test_settings_ensure_directories(tmp_path: pathlib.Path) -> None:
    """Test that ensure_directories creates the image directory."""
    image_dir = tmp_path / "public" / "schoolImages"
    settings = config.Settings(image_dir=image_dir)
    assert not image_dir.exists()
    settings.ensure_directories()
    assert image_dir.is_dir()
    settings.ensure_directories()
    assert image_dir.is_dir()


def test_get_settings_cached() -> None:
    """Test that get_settings returns cached instance."""
    config.get_settings.cache_clear()
    settings1 = config.get_settings()
    settings2 = config.get_settings()
    assert settings1 is settings2
    config.get_settings.cache_clear()


def test_get_settings_creates_directories(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: pathlib.Path,
) -> None:
    """Test that get_settings ensures the image directory exists."""
    image_dir = tmp_path / "images"
    monkeypatch.setenv("IMAGE_DIR", str(image_dir))
    config.get_settings.cache_clear()
    try:
        result = config.get_settings()
        assert result.image_dir == image_dir
        assert image_dir.exists()
    finally:
        config.get_settings.cache_clear()
