"""Financial account model."""

from decimal import Decimal

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, String, false
from sqlalchemy.orm import Mapped, mapped_column

from src.domain.enums import AccountType
from src.infrastructure.database.base import BaseModel
from src.infrastructure.database.models.types import money, string_enum

DEFAULT_CURRENCY = "CAD"


class Account(BaseModel):
    """A user's bank, credit, investment or cash account.

    ``balance`` is maintained by the ledger: it starts at the opening balance
    and moves with every posted, edited or deleted transaction.
    """

    __tablename__ = "accounts"
    __table_args__ = (Index("ix_accounts_user_id_is_deleted", "user_id", "is_deleted"),)

    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE")
    )
    name: Mapped[str] = mapped_column(String(100))
    type: Mapped[AccountType] = mapped_column(string_enum(AccountType, "account_type"))
    currency: Mapped[str] = mapped_column(
        String(3), default=DEFAULT_CURRENCY, server_default=DEFAULT_CURRENCY
    )
    balance: Mapped[Decimal] = mapped_column(
        money(), default=Decimal("0.00"), server_default="0"
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
