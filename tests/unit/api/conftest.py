"""Fixtures for API tests.

The application is built with ``create_app`` and driven through httpx's
``ASGITransport``; the lifespan does not run, so no database is touched.
Service providers are overridden with ``AsyncMock`` objects and requests
authenticate with real access tokens signed by the test secret.
"""

from collections.abc import AsyncGenerator, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pytest_mock import MockerFixture, MockType

from src.api.dependencies import (
    get_account_service,
    get_auth_service,
    get_bill_command_service,
    get_bill_query_service,
    get_budget_summary_service,
    get_transaction_service,
)
from src.api.main import create_app
from src.core.config import Settings
from src.infrastructure.cache import CacheService, get_cache_service
from src.infrastructure.security import get_token_service
from src.services.accounts import AccountService
from src.services.auth import AuthService
from src.services.billing import BillCommandService, BillQueryService
from src.services.budget import BudgetSummaryService
from src.services.transactions import TransactionService

USER_ID = 10


def _provide(mock: MockType) -> Callable[[], MockType]:
    return lambda: mock


@pytest.fixture
def app(mock_settings: Settings) -> FastAPI:
    return create_app(mock_settings)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client bound to the app; unhandled errors become 500 responses."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def auth_headers(mock_settings: Settings) -> dict[str, str]:
    token = get_token_service().create_access_token(
        USER_ID, "jane@example.com", ["User"]
    )
    return {"Authorization": f"Bearer {token.token}"}


@pytest.fixture
def services(app: FastAPI, mocker: MockerFixture) -> dict[str, MockType]:
    """Replace every service provider with a spec'd ``AsyncMock``.

    Returns:
        dict[str, MockType]: Mocks keyed by short service name.
    """
    mocks: dict[str, MockType] = {
        "accounts": mocker.AsyncMock(spec=AccountService),
        "transactions": mocker.AsyncMock(spec=TransactionService),
        "bill_commands": mocker.AsyncMock(spec=BillCommandService),
        "bill_queries": mocker.AsyncMock(spec=BillQueryService),
        "budget": mocker.AsyncMock(spec=BudgetSummaryService),
        "auth": mocker.AsyncMock(spec=AuthService),
        "cache": mocker.AsyncMock(spec=CacheService),
    }
    providers = {
        "accounts": get_account_service,
        "transactions": get_transaction_service,
        "bill_commands": get_bill_command_service,
        "bill_queries": get_bill_query_service,
        "budget": get_budget_summary_service,
        "auth": get_auth_service,
        "cache": get_cache_service,
    }
    for name, provider in providers.items():
        app.dependency_overrides[provider] = _provide(mocks[name])
    return mocks
