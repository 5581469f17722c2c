"""Income versus expense reporting over a date range."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import ValidationError
from src.domain.ledger import Direction, direction_of
from src.infrastructure.repositories import TransactionRepository


@dataclass(slots=True)
class MonthlyBreakdown:
    year: int
    month: int
    income: Decimal = Decimal("0.00")
    expense: Decimal = Decimal("0.00")


@dataclass(frozen=True, slots=True)
class CategorySpend:
    category: str
    amount: Decimal


@dataclass(frozen=True, slots=True)
class BudgetSummary:
    from_date: date
    to_date: date
    total_income: Decimal
    total_expenses: Decimal
    net: Decimal
    monthly: list[MonthlyBreakdown] = field(default_factory=list)
    # Transactions carry no category yet, so this stays empty
    top_categories: list[CategorySpend] = field(default_factory=list)


class BudgetSummaryService:
    def __init__(self, session: AsyncSession) -> None:
        self.transactions = TransactionRepository(session)

    async def summarize(
        self,
        user_id: int,
        from_date: date,
        to_date: date,
        account_id: int | None = None,
    ) -> BudgetSummary:
        """Monthly and overall income and expense between two dates.

        Both dates are inclusive and interpreted in UTC. Credit transaction
        types count as income and debit types as expenses.

        Args:
            user_id: Owner of the transactions.
            from_date: First day of the range.
            to_date: Last day of the range.
            account_id: Restrict the report to one account.

        Returns:
            BudgetSummary: Totals with a per-month breakdown in calendar order.

        Raises:
            ValidationError: If ``from_date`` is after ``to_date``.
        """
        if from_date > to_date:
            raise ValidationError(
                "'from' must be on or before 'to'",
                context={"from": from_date.isoformat(), "to": to_date.isoformat()},
            )

        rows = await self.transactions.monthly_totals(
            user_id,
            datetime.combine(from_date, time.min, tzinfo=UTC),
            datetime.combine(to_date, time.max, tzinfo=UTC),
            account_id,
        )

        months: dict[tuple[int, int], MonthlyBreakdown] = {}
        for row in rows:
            bucket = months.setdefault(
                (row.year, row.month), MonthlyBreakdown(year=row.year, month=row.month)
            )
            if direction_of(row.type) is Direction.CREDIT:
                bucket.income += row.total_amount
            else:
                bucket.expense += row.total_amount

        monthly = [months[key] for key in sorted(months)]
        total_income = sum((m.income for m in monthly), Decimal("0.00"))
        total_expenses = sum((m.expense for m in monthly), Decimal("0.00"))
        return BudgetSummary(
            from_date=from_date,
            to_date=to_date,
            total_income=total_income,
            total_expenses=total_expenses,
            net=total_income - total_expenses,
            monthly=monthly,
        )
