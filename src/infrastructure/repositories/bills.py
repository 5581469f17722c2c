"""Bill and bill payment persistence.

Inactive bills are treated as deleted: every lookup here filters on
``is_active``.
"""

import uuid
from datetime import date

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.infrastructure.database.models import Bill, BillPayment
from src.infrastructure.database.repository import BaseRepository


class BillRepository(BaseRepository[Bill]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Bill)

    async def get_active_for_user(
        self, bill_id: uuid.UUID, user_id: int, *, with_payments: bool = False
    ) -> Bill | None:
        """Fetch one of the user's active bills.

        Args:
            bill_id: Bill identifier.
            user_id: Owner the bill must belong to.
            with_payments: Eagerly load the payment history.

        Returns:
            Bill | None: The bill, or None if missing, inactive or not owned.
        """
        stmt = select(Bill).where(
            Bill.id == bill_id, Bill.user_id == user_id, Bill.is_active.is_(True)
        )
        if with_payments:
            stmt = stmt.options(selectinload(Bill.payments))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def active_duplicate_exists(
        self, user_id: int, name: str, due_date: date
    ) -> bool:
        """Whether the user already has an active bill with this name and date."""
        stmt = select(
            exists().where(
                Bill.user_id == user_id,
                Bill.name == name,
                Bill.due_date == due_date,
                Bill.is_active.is_(True),
            )
        )
        result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def list_due_between(
        self, user_id: int, start: date, end: date
    ) -> list[Bill]:
        """Active bills due within ``[start, end]``, soonest first."""
        stmt = (
            select(Bill)
            .where(
                Bill.user_id == user_id,
                Bill.is_active.is_(True),
                Bill.due_date >= start,
                Bill.due_date <= end,
            )
            .order_by(Bill.due_date, Bill.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_due_before(self, user_id: int, before: date) -> list[Bill]:
        """Active bills whose due date is earlier than ``before``, oldest first."""
        stmt = (
            select(Bill)
            .where(
                Bill.user_id == user_id,
                Bill.is_active.is_(True),
                Bill.due_date < before,
            )
            .order_by(Bill.due_date, Bill.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class BillPaymentRepository(BaseRepository[BillPayment]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, BillPayment)
