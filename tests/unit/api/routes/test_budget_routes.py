"""Unit tests for the /api/budget-summary endpoint."""

from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from pytest_mock import MockType

from src.core.exceptions import ValidationError
from src.services.budget import BudgetSummary, MonthlyBreakdown


@pytest.mark.unit
class TestBudgetSummaryRoute:
    async def test_summary(
        self,
        client: AsyncClient,
        services: dict[str, MockType],
        auth_headers: dict[str, str],
    ) -> None:
        services["budget"].summarize.return_value = BudgetSummary(
            from_date=date(2025, 1, 1),
            to_date=date(2025, 2, 28),
            total_income=Decimal("2050.00"),
            total_expenses=Decimal("490.00"),
            net=Decimal("1560.00"),
            monthly=[
                MonthlyBreakdown(2025, 1, Decimal("2000.00"), Decimal("190.00")),
                MonthlyBreakdown(2025, 2, Decimal("50.00"), Decimal("300.00")),
            ],
        )

        response = await client.get(
            "/api/budget-summary",
            headers=auth_headers,
            params={"from": "2025-01-01", "to": "2025-02-28"},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["from_date"] == "2025-01-01"
        assert body["net"] == 1560.0
        assert body["monthly"][1] == {
            "year": 2025,
            "month": 2,
            "income": 50.0,
            "expense": 300.0,
        }
        assert body["top_categories"] == []
        services["budget"].summarize.assert_awaited_once_with(
            10, date(2025, 1, 1), date(2025, 2, 28), None
        )

    async def test_filters_by_account(
        self,
        client: AsyncClient,
        services: dict[str, MockType],
        auth_headers: dict[str, str],
    ) -> None:
        services["budget"].summarize.return_value = BudgetSummary(
            from_date=date(2025, 3, 1),
            to_date=date(2025, 3, 31),
            total_income=Decimal("0.00"),
            total_expenses=Decimal("0.00"),
            net=Decimal("0.00"),
        )

        await client.get(
            "/api/budget-summary",
            headers=auth_headers,
            params={"from": "2025-03-01", "to": "2025-03-31", "account_id": 4},
        )

        services["budget"].summarize.assert_awaited_once_with(
            10, date(2025, 3, 1), date(2025, 3, 31), 4
        )

    async def test_requires_range(
        self,
        client: AsyncClient,
        services: dict[str, MockType],
        auth_headers: dict[str, str],
    ) -> None:
        response = await client.get(
            "/api/budget-summary", headers=auth_headers, params={"from": "2025-03-01"}
        )

        assert response.status_code == 422
        services["budget"].summarize.assert_not_awaited()

    async def test_reversed_range(
        self,
        client: AsyncClient,
        services: dict[str, MockType],
        auth_headers: dict[str, str],
    ) -> None:
        services["budget"].summarize.side_effect = ValidationError(
            "'from' must be on or before 'to'"
        )

        response = await client.get(
            "/api/budget-summary",
            headers=auth_headers,
            params={"from": "2025-03-02", "to": "2025-03-01"},
        )

        assert response.status_code == 400
