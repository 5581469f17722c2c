"""Account persistence, always scoped to the owning user."""

from decimal import Decimal
from typing import NamedTuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.enums import AccountType
from src.infrastructure.database.models import Account
from src.infrastructure.database.repository import BaseRepository


class AccountTypeTotal(NamedTuple):
    type: AccountType
    count: int
    total_balance: Decimal


class AccountRepository(BaseRepository[Account]):
    """Queries over a user's live (not soft deleted) accounts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Account)

    async def list_for_user(self, user_id: int) -> list[Account]:
        stmt = (
            select(Account)
            .where(Account.user_id == user_id, Account.is_deleted.is_(False))
            .order_by(Account.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_user(
        self, account_id: int, user_id: int, *, for_update: bool = False
    ) -> Account | None:
        """Fetch one of the user's accounts.

        Args:
            account_id: Account primary key.
            user_id: Owner the account must belong to.
            for_update: Lock the row until the transaction ends, used before
                changing the balance.

        Returns:
            Account | None: The account, or None when missing, deleted or
            owned by someone else.
        """
        stmt = select(Account).where(
            Account.id == account_id,
            Account.user_id == user_id,
            Account.is_deleted.is_(False),
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def totals_by_type(self, user_id: int) -> list[AccountTypeTotal]:
        """Account count and summed balance per account type."""
        stmt = (
            select(
                Account.type,
                func.count(Account.id),
                func.coalesce(func.sum(Account.balance), 0),
            )
            .where(Account.user_id == user_id, Account.is_deleted.is_(False))
            .group_by(Account.type)
            .order_by(Account.type)
        )
        result = await self.session.execute(stmt)
        return [
            AccountTypeTotal(
                type=row[0], count=int(row[1]), total_balance=Decimal(row[2])
            )
            for row in result.all()
        ]
