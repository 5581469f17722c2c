"""Account request and response models."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.api.schemas.common import MONEY_MAX_DIGITS, Money
from src.domain.enums import AccountType
from src.infrastructure.database.models.account import DEFAULT_CURRENCY


class CreateAccountRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: AccountType
    initial_balance: Decimal = Field(
        default=Decimal("0.00"), ge=0, max_digits=MONEY_MAX_DIGITS, decimal_places=2
    )
    currency: str = Field(
        default=DEFAULT_CURRENCY, min_length=3, max_length=3, pattern=r"^[A-Za-z]{3}$"
    )


class UpdateAccountRequest(BaseModel):
    """Partial update; omitted fields keep their value."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    type: AccountType | None = None
    currency: str | None = Field(
        default=None, min_length=3, max_length=3, pattern=r"^[A-Za-z]{3}$"
    )


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: AccountType
    currency: str
    balance: Money
    created_at: datetime
    updated_at: datetime


class AccountTypeTotalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: AccountType
    count: int
    total_balance: Money


class AccountSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_accounts: int
    total_balance: Money
    accounts_by_type: list[AccountTypeTotalResponse]
