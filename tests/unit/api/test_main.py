"""Unit tests for the application factory, middleware stack and lifespan."""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from pytest_mock import MockerFixture

from src.api.main import create_app, lifespan
from src.core.config import Settings


@pytest.mark.unit
class TestCreateApp:
    def test_uses_settings(self, app: FastAPI, mock_settings: Settings) -> None:
        assert app.title == mock_settings.app_name
        assert app.version == mock_settings.app_version

    def test_registers_api_routes(self, app: FastAPI) -> None:
        paths = {getattr(route, "path", "") for route in app.routes}

        for expected in (
            "/api/auth/login",
            "/api/accounts",
            "/api/accounts/summary",
            "/api/transactions/date-range",
            "/api/billing/upcoming",
            "/api/billing/bills/{bill_id}/pay",
            "/api/budget-summary",
            "/cache/{key}",
        ):
            assert expected in paths

    def test_disabled_docs(self, mock_settings: Settings) -> None:
        settings = mock_settings.model_copy(
            update={"docs_url": None, "redoc_url": None}
        )

        application = create_app(settings)

        paths = {getattr(route, "path", "") for route in application.routes}
        assert "/docs" not in paths
        assert "/redoc" not in paths

    async def test_root(self, client: AsyncClient) -> None:
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json() == {"name": "TestApp", "version": "1.0.0"}


@pytest.mark.unit
class TestMiddlewareStack:
    async def test_security_headers(self, client: AsyncClient) -> None:
        response = await client.get("/")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"
        assert response.headers["Strict-Transport-Security"].startswith("max-age=")

    async def test_correlation_id_is_echoed(self, client: AsyncClient) -> None:
        response = await client.get("/", headers={"X-Correlation-ID": "trace-abc"})

        assert response.headers["X-Correlation-ID"] == "trace-abc"
        assert response.headers["X-Request-ID"].startswith("req-")

    async def test_correlation_id_generated(self, client: AsyncClient) -> None:
        first = await client.get("/")
        second = await client.get("/")

        assert first.headers["X-Correlation-ID"] != second.headers["X-Correlation-ID"]

    async def test_cors_preflight(self, client: AsyncClient) -> None:
        response = await client.options(
            "/api/accounts",
            headers={
                "Origin": "http://localhost:4200",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == 200
        assert (
            response.headers["access-control-allow-origin"] == "http://localhost:4200"
        )


@pytest.mark.unit
class TestLifespan:
    async def test_startup_and_shutdown(
        self, app: FastAPI, mocker: MockerFixture
    ) -> None:
        check = mocker.patch(
            "src.api.main.check_database_connection",
            new_callable=mocker.AsyncMock,
            return_value=(True, None),
        )
        close_cache = mocker.patch(
            "src.api.main.close_cache", new_callable=mocker.AsyncMock
        )
        close_database = mocker.patch(
            "src.api.main.close_database", new_callable=mocker.AsyncMock
        )

        async with lifespan(app):
            check.assert_awaited_once()
            close_database.assert_not_awaited()

        close_cache.assert_awaited_once()
        close_database.assert_awaited_once()

    async def test_startup_fails_without_database(
        self, app: FastAPI, mocker: MockerFixture
    ) -> None:
        mocker.patch(
            "src.api.main.check_database_connection",
            new_callable=mocker.AsyncMock,
            return_value=(False, "connection refused"),
        )

        with pytest.raises(RuntimeError, match="connection refused"):
            async with lifespan(app):
                pass
