"""Unit tests for AccountService."""

from collections.abc import Callable
from decimal import Decimal
from typing import Any

import pytest
from pytest_mock import MockerFixture, MockType

from src.core.exceptions import NotFoundError, ValidationError
from src.domain.enums import AccountType
from src.infrastructure.database.models import Account
from src.infrastructure.repositories import AccountRepository
from src.infrastructure.repositories.accounts import AccountTypeTotal
from src.services.accounts import AccountService


@pytest.fixture
def accounts(mocker: MockerFixture) -> MockType:
    return mocker.AsyncMock(spec=AccountRepository)


@pytest.fixture
def service(session: MockType, accounts: MockType) -> AccountService:
    account_service = AccountService(session)
    account_service.accounts = accounts
    return account_service


@pytest.mark.unit
class TestCreateAccount:
    async def test_opening_balance_becomes_balance(
        self,
        service: AccountService,
        accounts: MockType,
        echo_created: Callable[[Any], Any],
    ) -> None:
        accounts.create.side_effect = echo_created

        account = await service.create(
            10,
            name="  Rainy day ",
            type=AccountType.SAVINGS,
            initial_balance=Decimal("250.005"),
            currency="usd",
        )

        assert account.user_id == 10
        assert account.name == "Rainy day"
        assert account.currency == "USD"
        assert account.balance == Decimal("250.01")
        assert account.is_deleted is False

    async def test_negative_opening_balance_rejected(
        self, service: AccountService, accounts: MockType
    ) -> None:
        with pytest.raises(ValidationError, match="cannot be negative"):
            await service.create(
                10,
                name="Overdrawn",
                type=AccountType.CHECKING,
                initial_balance=Decimal("-1"),
                currency="CAD",
            )

        accounts.create.assert_not_awaited()


@pytest.mark.unit
class TestReadAccounts:
    async def test_get_missing_account(
        self, service: AccountService, accounts: MockType
    ) -> None:
        accounts.get_for_user.return_value = None

        with pytest.raises(NotFoundError, match="Account 5 not found"):
            await service.get(10, 5)

        accounts.get_for_user.assert_awaited_once_with(5, 10)

    async def test_list_for_user(
        self,
        service: AccountService,
        accounts: MockType,
        make_account: Callable[..., Account],
    ) -> None:
        owned = [make_account(id=1), make_account(id=2)]
        accounts.list_for_user.return_value = owned

        assert await service.list_for_user(10) == owned

    async def test_summary_totals(
        self, service: AccountService, accounts: MockType
    ) -> None:
        accounts.totals_by_type.return_value = [
            AccountTypeTotal(AccountType.CHECKING, 2, Decimal("150.00")),
            AccountTypeTotal(AccountType.SAVINGS, 1, Decimal("1000.50")),
        ]

        summary = await service.summary(10)

        assert summary.total_accounts == 3
        assert summary.total_balance == Decimal("1150.50")
        assert len(summary.accounts_by_type) == 2

    async def test_summary_without_accounts(
        self, service: AccountService, accounts: MockType
    ) -> None:
        accounts.totals_by_type.return_value = []

        summary = await service.summary(10)

        assert summary.total_accounts == 0
        assert summary.total_balance == Decimal("0.00")


@pytest.mark.unit
class TestModifyAccounts:
    async def test_partial_update(
        self,
        service: AccountService,
        accounts: MockType,
        make_account: Callable[..., Account],
        apply_update: Callable[..., Any],
    ) -> None:
        account = make_account()
        accounts.get_for_user.return_value = account
        accounts.update.side_effect = apply_update

        updated = await service.update(10, 1, currency="eur")

        assert updated.currency == "EUR"
        assert updated.name == "Everyday"
        assert updated.balance == Decimal("100.00")

    async def test_update_missing_account(
        self, service: AccountService, accounts: MockType
    ) -> None:
        accounts.get_for_user.return_value = None

        with pytest.raises(NotFoundError):
            await service.update(10, 1, name="New")

        accounts.update.assert_not_awaited()

    async def test_soft_delete(
        self,
        service: AccountService,
        accounts: MockType,
        session: MockType,
        make_account: Callable[..., Account],
    ) -> None:
        account = make_account()
        accounts.get_for_user.return_value = account

        await service.delete(10, 1)

        assert account.is_deleted is True
        session.flush.assert_awaited_once()
