"""Account transaction model."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.domain.enums import TransactionType
from src.infrastructure.database.base import BaseModel
from src.infrastructure.database.models.types import money, string_enum


class Transaction(BaseModel):
    """Money moving in or out of an account at a point in time."""

    __tablename__ = "transactions"
    __table_args__ = (CheckConstraint("amount > 0", name="amount_positive"),)

    account_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("accounts.id", ondelete="CASCADE"), index=True
    )
    type: Mapped[TransactionType] = mapped_column(
        string_enum(TransactionType, "transaction_type")
    )
    description: Mapped[str] = mapped_column(
        String(200), default="", server_default=""
    )
    amount: Mapped[Decimal] = mapped_column(money())
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
