"""Transaction persistence.

Transactions have no owner column of their own; every query joins the
account and filters on its ``user_id``. Transactions of deleted accounts are
treated as gone.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, NamedTuple

from sqlalchemy import Select, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.enums import TransactionType
from src.infrastructure.database.models import Account, Transaction
from src.infrastructure.database.repository import BaseRepository


class TransactionTypeTotal(NamedTuple):
    type: TransactionType
    count: int
    total_amount: Decimal


class MonthlyTypeTotal(NamedTuple):
    year: int
    month: int
    type: TransactionType
    total_amount: Decimal


class TransactionRepository(BaseRepository[Transaction]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Transaction)

    @staticmethod
    def _owned_by(stmt: Select[Any], user_id: int) -> Select[Any]:
        return stmt.join(Account, Account.id == Transaction.account_id).where(
            Account.user_id == user_id,
            Account.is_deleted.is_(False),
            Transaction.is_deleted.is_(False),
        )

    @staticmethod
    def _in_range(
        stmt: Select[Any], start: datetime | None, end: datetime | None
    ) -> Select[Any]:
        if start is not None:
            stmt = stmt.where(Transaction.occurred_at >= start)
        if end is not None:
            stmt = stmt.where(Transaction.occurred_at <= end)
        return stmt

    async def list_for_user(
        self,
        user_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Transaction]:
        """The user's transactions, newest first, optionally within a range."""
        stmt = self._in_range(self._owned_by(select(Transaction), user_id), start, end)
        stmt = stmt.order_by(Transaction.occurred_at.desc(), Transaction.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_account(
        self, account_id: int, user_id: int
    ) -> list[Transaction]:
        stmt = (
            self._owned_by(select(Transaction), user_id)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.occurred_at.desc(), Transaction.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_user(
        self, transaction_id: int, user_id: int
    ) -> Transaction | None:
        stmt = self._owned_by(select(Transaction), user_id).where(
            Transaction.id == transaction_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def totals_by_type(
        self,
        user_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[TransactionTypeTotal]:
        """Count and summed amount per transaction type."""
        stmt = select(
            Transaction.type,
            func.count(Transaction.id),
            func.coalesce(func.sum(Transaction.amount), 0),
        )
        stmt = self._in_range(self._owned_by(stmt, user_id), start, end)
        stmt = stmt.group_by(Transaction.type).order_by(Transaction.type)
        result = await self.session.execute(stmt)
        return [
            TransactionTypeTotal(
                type=row[0], count=int(row[1]), total_amount=Decimal(row[2])
            )
            for row in result.all()
        ]

    async def monthly_totals(
        self,
        user_id: int,
        start: datetime,
        end: datetime,
        account_id: int | None = None,
    ) -> list[MonthlyTypeTotal]:
        """Summed amount per calendar month (UTC) and transaction type."""
        occurred_utc = func.timezone("UTC", Transaction.occurred_at)
        year = extract("year", occurred_utc)
        month = extract("month", occurred_utc)

        stmt = select(year, month, Transaction.type, func.sum(Transaction.amount))
        stmt = self._in_range(self._owned_by(stmt, user_id), start, end)
        if account_id is not None:
            stmt = stmt.where(Transaction.account_id == account_id)
        stmt = stmt.group_by(year, month, Transaction.type).order_by(year, month)

        result = await self.session.execute(stmt)
        return [
            MonthlyTypeTotal(
                year=int(row[0]),
                month=int(row[1]),
                type=row[2],
                total_amount=Decimal(row[3]),
            )
            for row in result.all()
        ]
