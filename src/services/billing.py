"""Bill commands (create, pay) and queries (upcoming, overdue, details).

Due dates are calendar dates compared against today's UTC date. Queries only
ever see active bills; a one-off bill stops being active once paid.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import BillingConfig
from src.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.core.observability import trace_operation
from src.domain import clock
from src.domain.billing import assess_due_date, clamp_horizon, next_due_date
from src.domain.enums import BillStatus, Frequency
from src.domain.ledger import quantize_money
from src.infrastructure.database.models import Bill, BillPayment
from src.infrastructure.repositories import BillPaymentRepository, BillRepository

DUPLICATE_BILL_MESSAGE = "A bill with the same name and due date already exists"


@dataclass(frozen=True, slots=True)
class BillListItem:
    id: uuid.UUID
    name: str
    amount: Decimal
    due_date: date
    days_until_due: int
    status: BillStatus
    is_recurring: bool
    frequency: Frequency | None
    category: str | None
    auto_pay: bool


@dataclass(frozen=True, slots=True)
class BillPaymentItem:
    id: uuid.UUID
    paid_at: datetime
    amount: Decimal
    notes: str | None


@dataclass(frozen=True, slots=True)
class BillDetails:
    id: uuid.UUID
    name: str
    amount: Decimal
    due_date: date
    days_until_due: int
    status: BillStatus
    is_recurring: bool
    frequency: Frequency | None
    category: str | None
    auto_pay: bool
    is_active: bool
    created_at: datetime
    last_paid_at: datetime | None
    payments: list[BillPaymentItem] = field(default_factory=list)


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class BillCommandService:
    """State changing bill operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.bills = BillRepository(session)
        self.payments = BillPaymentRepository(session)

    async def create(
        self,
        user_id: int,
        *,
        name: str,
        amount: Decimal,
        due_date: date,
        is_recurring: bool = False,
        frequency: Frequency | None = None,
        category: str | None = None,
        auto_pay: bool = False,
    ) -> uuid.UUID:
        """Register a new bill.

        Returns:
            uuid.UUID: Identifier of the new bill.

        Raises:
            ValidationError: If the name is blank, the amount is not positive or
                a recurring bill has no frequency.
            ConflictError: If an active bill with the same name and due date
                already exists for the user.
        """
        name = name.strip()
        if not name:
            raise ValidationError("Name is required")
        if amount <= 0:
            raise ValidationError(
                "Amount must be greater than zero", context={"amount": str(amount)}
            )
        if is_recurring and frequency is None:
            raise ValidationError("Frequency is required for recurring bills")

        if await self.bills.active_duplicate_exists(user_id, name, due_date):
            raise ConflictError(
                DUPLICATE_BILL_MESSAGE,
                context={"name": name, "due_date": due_date.isoformat()},
            )

        bill = Bill(
            user_id=user_id,
            name=name,
            amount=quantize_money(amount),
            due_date=due_date,
            is_recurring=is_recurring,
            frequency=frequency,
            category=_clean_optional(category),
            auto_pay=auto_pay,
            is_active=True,
        )
        try:
            bill = await self.bills.create(bill)
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same bill
            raise ConflictError(DUPLICATE_BILL_MESSAGE, cause=e) from e

        logger.info("Bill {} created", bill.id, user_id=user_id, recurring=is_recurring)
        return bill.id

    async def pay(
        self,
        user_id: int,
        bill_id: uuid.UUID,
        *,
        amount: Decimal,
        paid_at: datetime | None = None,
        notes: str | None = None,
    ) -> uuid.UUID:
        """Record a payment and roll the bill forward.

        A recurring bill moves to its next due date; a one-off bill becomes
        inactive.

        Returns:
            uuid.UUID: Identifier of the recorded payment.

        Raises:
            NotFoundError: If the bill is missing, inactive or not the user's.
            ValidationError: If the amount is not positive.
            ConflictError: If the user already has an active bill with the same
                name on the next due date.
        """
        if amount <= 0:
            raise ValidationError(
                "Amount must be greater than zero", context={"amount": str(amount)}
            )

        with trace_operation("billing.pay_bill", bill_id=str(bill_id)) as span:
            bill = await self.bills.get_active_for_user(bill_id, user_id)
            if bill is None:
                raise NotFoundError(
                    "Bill not found", context={"bill_id": str(bill_id)}
                )

            paid_at = clock.ensure_utc(paid_at) if paid_at else clock.utc_now()
            if bill.is_recurring:
                previous_due = bill.due_date
                new_due = next_due_date(previous_due, bill.frequency)
                # Checked before assignment so autoflush cannot hit the index
                if new_due != previous_due and await self.bills.active_duplicate_exists(
                    user_id, bill.name, new_due
                ):
                    raise ConflictError(
                        DUPLICATE_BILL_MESSAGE,
                        context={"name": bill.name, "due_date": new_due.isoformat()},
                    )
                bill.due_date = new_due
                span.set_attribute("next_due_date", new_due.isoformat())
                logger.debug(
                    "Bill {} advanced from {} to {}", bill.id, previous_due, new_due
                )
            else:
                bill.is_active = False
            bill.last_paid_at = paid_at

            try:
                payment = await self.payments.create(
                    BillPayment(
                        bill_id=bill.id,
                        paid_at=paid_at,
                        amount=quantize_money(amount),
                        notes=_clean_optional(notes),
                    )
                )
            except IntegrityError as e:
                raise ConflictError(DUPLICATE_BILL_MESSAGE, cause=e) from e

        logger.info(
            "Bill {} paid", bill_id, user_id=user_id, payment_id=str(payment.id)
        )
        return payment.id


class BillQueryService:
    """Read-only bill views with due-date status."""

    def __init__(self, session: AsyncSession, config: BillingConfig) -> None:
        self.bills = BillRepository(session)
        self.config = config

    def _to_list_item(self, bill: Bill, today: date) -> BillListItem:
        assessment = assess_due_date(
            bill.due_date, today, self.config.due_soon_threshold_days
        )
        return BillListItem(
            id=bill.id,
            name=bill.name,
            amount=bill.amount,
            due_date=bill.due_date,
            days_until_due=assessment.days_until_due,
            status=assessment.status,
            is_recurring=bill.is_recurring,
            frequency=bill.frequency,
            category=bill.category,
            auto_pay=bill.auto_pay,
        )

    async def upcoming(self, user_id: int, days: int) -> list[BillListItem]:
        """Active bills due from today through the look-ahead window.

        Args:
            user_id: Owner of the bills.
            days: Requested window; non-positive means the default window and
                anything above the maximum is capped.

        Returns:
            list[BillListItem]: Bills ordered by due date.
        """
        horizon = clamp_horizon(
            days, self.config.default_horizon_days, self.config.max_horizon_days
        )
        today = clock.utc_today()
        bills = await self.bills.list_due_between(
            user_id, today, today + timedelta(days=horizon)
        )
        return [self._to_list_item(bill, today) for bill in bills]

    async def overdue(self, user_id: int) -> list[BillListItem]:
        """Active bills whose due date has passed, oldest first."""
        today = clock.utc_today()
        bills = await self.bills.list_due_before(user_id, today)
        return [self._to_list_item(bill, today) for bill in bills]

    async def details(self, user_id: int, bill_id: uuid.UUID) -> BillDetails:
        """One active bill with its payment history, newest payment first.

        Raises:
            NotFoundError: If the bill is missing, inactive or not the user's.
        """
        bill = await self.bills.get_active_for_user(
            bill_id, user_id, with_payments=True
        )
        if bill is None:
            raise NotFoundError("Bill not found", context={"bill_id": str(bill_id)})

        item = self._to_list_item(bill, clock.utc_today())
        return BillDetails(
            id=item.id,
            name=item.name,
            amount=item.amount,
            due_date=item.due_date,
            days_until_due=item.days_until_due,
            status=item.status,
            is_recurring=item.is_recurring,
            frequency=item.frequency,
            category=item.category,
            auto_pay=item.auto_pay,
            is_active=bill.is_active,
            created_at=bill.created_at,
            last_paid_at=bill.last_paid_at,
            payments=[
                BillPaymentItem(
                    id=payment.id,
                    paid_at=payment.paid_at,
                    amount=payment.amount,
                    notes=payment.notes,
                )
                for payment in sorted(
                    bill.payments, key=lambda payment: payment.paid_at, reverse=True
                )
            ],
        )
