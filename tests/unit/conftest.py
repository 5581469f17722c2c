"""Shared fixtures for unit tests."""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime

import pytest
from pytest_mock import MockerFixture, MockType

from src.core.config import Settings, get_settings
from src.core.context import RequestContext
from src.core.error_context import _get_sensitive_fields
from src.infrastructure.security import get_token_service
from tests.fixtures.model_fixtures import (
    make_account,
    make_bill,
    make_payment,
    make_transaction,
    make_user,
)

__all__ = [
    "clean_context",
    "clean_env",
    "clean_lru_cache",
    "frozen_clock",
    "make_account",
    "make_bill",
    "make_payment",
    "make_transaction",
    "make_user",
    "mock_settings",
]

FIXED_NOW = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear cached settings and settings-derived singletons around each test."""
    get_settings.cache_clear()
    get_token_service.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    get_token_service.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch]:
    """Drop application env vars set by a test so they cannot leak.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Yields:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    original_env = os.environ.copy()
    for key in ("APP_NAME", "APP_VERSION", "API_HOST", "API_PORT", "PORT"):
        monkeypatch.delenv(key, raising=False)

    yield monkeypatch

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Start and finish every test with an empty request context."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Real Settings built from test environment values.

    Returns:
        Settings: Settings object with test defaults.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")
    return Settings()


@pytest.fixture
def frozen_clock(mocker: MockerFixture) -> Callable[[datetime], MockType]:
    """Pin ``clock.utc_now`` (and therefore ``utc_today``) to a fixed instant.

    Returns:
        Callable[[datetime], MockType]: Call with the instant to freeze at;
            defaults to 2025-03-15 12:00 UTC when the fixture is used as is.
    """
    mock_now = mocker.patch("src.domain.clock.utc_now", return_value=FIXED_NOW)

    def freeze(at: datetime) -> MockType:
        mock_now.return_value = at
        return mock_now

    return freeze
