"""Transaction request and response models.

The API calls the moment a transaction happened ``timestamp``; it is stored
as ``occurred_at``.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.api.schemas.common import Money, PositiveMoney
from src.domain.enums import TransactionType


class CreateTransactionRequest(BaseModel):
    account_id: int = Field(..., gt=0)
    amount: PositiveMoney
    type: TransactionType
    description: str | None = Field(default=None, max_length=200)
    timestamp: datetime | None = Field(
        default=None, description="When it happened; defaults to now (UTC)"
    )


class UpdateTransactionRequest(BaseModel):
    """Partial update; omitted fields keep their value."""

    amount: PositiveMoney | None = None
    type: TransactionType | None = None
    description: str | None = Field(default=None, max_length=200)
    timestamp: datetime | None = None


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: int
    type: TransactionType
    description: str
    amount: Money
    timestamp: datetime = Field(
        ..., validation_alias=AliasChoices("timestamp", "occurred_at")
    )
    created_at: datetime
    updated_at: datetime


class TransactionTypeTotalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: TransactionType
    count: int
    total_amount: Money


class TransactionSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_transactions: int
    total_income: Money
    total_expenses: Money
    net_amount: Money
    start_date: datetime | None
    end_date: datetime | None
    transactions_by_type: list[TransactionTypeTotalResponse]
