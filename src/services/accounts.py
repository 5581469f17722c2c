"""Account management for the authenticated user."""

from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError, ValidationError
from src.domain.enums import AccountType
from src.domain.ledger import quantize_money
from src.infrastructure.database.models import Account
from src.infrastructure.repositories import AccountRepository
from src.infrastructure.repositories.accounts import AccountTypeTotal


@dataclass(frozen=True, slots=True)
class AccountSummary:
    total_accounts: int
    total_balance: Decimal
    accounts_by_type: list[AccountTypeTotal] = field(default_factory=list)


class AccountService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.accounts = AccountRepository(session)

    async def create(
        self,
        user_id: int,
        *,
        name: str,
        type: AccountType,  # noqa: A002
        initial_balance: Decimal,
        currency: str,
    ) -> Account:
        """Open a new account whose balance starts at ``initial_balance``.

        Raises:
            ValidationError: If the opening balance is negative.
        """
        if initial_balance < 0:
            raise ValidationError(
                "Initial balance cannot be negative",
                context={"initial_balance": str(initial_balance)},
            )

        account = await self.accounts.create(
            Account(
                user_id=user_id,
                name=name.strip(),
                type=type,
                currency=currency.strip().upper(),
                balance=quantize_money(initial_balance),
                is_deleted=False,
            )
        )
        logger.info(
            "Account {} opened", account.id, user_id=user_id, account_type=type.value
        )
        return account

    async def list_for_user(self, user_id: int) -> list[Account]:
        return await self.accounts.list_for_user(user_id)

    async def get(self, user_id: int, account_id: int) -> Account:
        """Return one of the user's accounts.

        Raises:
            NotFoundError: If the account is missing, deleted or not the user's.
        """
        account = await self.accounts.get_for_user(account_id, user_id)
        if account is None:
            raise NotFoundError(
                f"Account {account_id} not found", context={"account_id": account_id}
            )
        return account

    async def update(
        self,
        user_id: int,
        account_id: int,
        *,
        name: str | None = None,
        type: AccountType | None = None,  # noqa: A002
        currency: str | None = None,
    ) -> Account:
        """Rename, retype or change the currency of an account.

        Fields left as None keep their value. The balance cannot be edited.
        """
        account = await self.get(user_id, account_id)
        return await self.accounts.update(
            account,
            {
                "name": name.strip() if name is not None else None,
                "type": type,
                "currency": currency.strip().upper() if currency is not None else None,
            },
        )

    async def delete(self, user_id: int, account_id: int) -> None:
        """Soft delete an account; it disappears from every query."""
        account = await self.get(user_id, account_id)
        account.is_deleted = True
        await self.session.flush()
        logger.info("Account {} deleted", account_id, user_id=user_id)

    async def summary(self, user_id: int) -> AccountSummary:
        by_type = await self.accounts.totals_by_type(user_id)
        return AccountSummary(
            total_accounts=sum(row.count for row in by_type),
            total_balance=sum((row.total_balance for row in by_type), Decimal("0.00")),
            accounts_by_type=by_type,
        )
