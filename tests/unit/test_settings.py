# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for application settings."""

import os
from unittest.mock import patch

import pytest

from src.core.config import (
    DatabaseSettings,
    ImportSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload settings from the environment for each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


class TestDatabaseSettings:
    """Tests for DatabaseSettings."""

    def test_url_from_components(self):
        with patch.dict(os.environ, {"DATABASE_HOST": "db", "DATABASE_PORT": "5433"}, clear=True):
            settings = DatabaseSettings()

        assert settings.url.startswith("postgresql+asyncpg://academic:")
        assert settings.url.endswith("@db:5433/academic_records")
        assert settings.is_sqlite is False

    def test_url_override(self):
        with patch.dict(os.environ, {"DATABASE_URL": "sqlite+aiosqlite:///./records.db"}, clear=True):
            settings = DatabaseSettings()

        assert settings.url == "sqlite+aiosqlite:///./records.db"
        assert settings.sync_url == "sqlite:///./records.db"
        assert settings.is_sqlite is True


class TestImportSettings:
    """Tests for ImportSettings."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = ImportSettings()

        assert settings.max_rows == 10_000
        assert settings.max_file_mb == 10
        assert settings.validate_schema is True
        assert settings.max_file_bytes == 10 * 1024 * 1024

    def test_from_environment(self):
        env = {"IMPORT_MAX_ROWS": "500", "IMPORT_VALIDATE_SCHEMA": "false"}
        with patch.dict(os.environ, env, clear=True):
            settings = ImportSettings()

        assert settings.max_rows == 500
        assert settings.validate_schema is False


class TestSettings:
    """Tests for the aggregated Settings."""

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_clear_cache_reloads(self):
        with patch.dict(os.environ, {"API_MAX_PAGE_SIZE": "50"}, clear=True):
            clear_settings_cache()
            assert get_settings().api.max_page_size == 50

    def test_production_requires_database_password(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}, clear=True):
            with pytest.raises(ValueError, match="Database password"):
                Settings(_env_file=None)

    def test_production_with_password(self):
        env = {"ENVIRONMENT": "production", "DATABASE_PASSWORD": "s3cret"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.is_production is True

    def test_cors_origins_list(self):
        with patch.dict(os.environ, {"CORS_ORIGINS": "http://a.test, http://b.test,"}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.cors.origins_list == ["http://a.test", "http://b.test"]
