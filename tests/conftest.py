"""Pytest configuration and shared fixtures."""

import sys

import pytest

from eventhub.config import Settings, get_settings
from eventhub.core.base_adapter import AdapterConfig

# Fix encoding for Windows
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Drop cached settings so env changes in one test don't leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the developer's .env file."""
    return Settings(
        _env_file=None,
        supabase_url=None,
        supabase_service_role_key=None,
        retention_days=1,
        dry_run=False,
    )


@pytest.fixture
def fast_config() -> AdapterConfig:
    """Browser adapter config without pauses."""
    return AdapterConfig(
        settle_ms=0,
        scroll_pause_ms=0,
        navigation_timeout_ms=1000,
        selector_timeout_ms=10,
    )
