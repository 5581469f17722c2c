"""Bill and bill payment models."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Uuid,
    false,
    text,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.domain.enums import Frequency
from src.infrastructure.database.base import UUIDModel
from src.infrastructure.database.models.types import money, string_enum


class Bill(UUIDModel):
    """An amount owed on a due date, optionally repeating.

    Active bills are unique per user, name and due date. Paying a one-off
    bill deactivates it; paying a recurring bill moves its due date forward.
    """

    __tablename__ = "bills"
    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive"),
        Index(
            "ix_bills_user_id_is_active_due_date", "user_id", "is_active", "due_date"
        ),
        Index(
            "uq_bills_active_user_id_name_due_date",
            "user_id",
            "name",
            "due_date",
            unique=True,
            postgresql_where=text("is_active"),
        ),
    )

    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE")
    )
    name: Mapped[str] = mapped_column(String(120))
    amount: Mapped[Decimal] = mapped_column(money())
    due_date: Mapped[date] = mapped_column(Date)
    is_recurring: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    frequency: Mapped[Frequency | None] = mapped_column(
        string_enum(Frequency, "bill_frequency")
    )
    category: Mapped[str | None] = mapped_column(String(60))
    auto_pay: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true()
    )
    last_paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    payments: Mapped[list["BillPayment"]] = relationship(
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillPayment.paid_at.desc()",
        lazy="raise",
    )


class BillPayment(UUIDModel):
    """A payment made against a bill."""

    __tablename__ = "bill_payments"
    __table_args__ = (CheckConstraint("amount > 0", name="amount_positive"),)

    bill_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bills.id", ondelete="CASCADE"), index=True
    )
    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    amount: Mapped[Decimal] = mapped_column(money())
    notes: Mapped[str | None] = mapped_column(String(240))

    bill: Mapped[Bill] = relationship(back_populates="payments", lazy="raise")
