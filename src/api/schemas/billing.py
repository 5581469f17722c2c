"""Bill request and response models."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.api.schemas.common import Money, PositiveMoney
from src.domain.enums import BillStatus, Frequency


class CreateBillRequest(BaseModel):
    name: str = Field(..., max_length=120)
    amount: PositiveMoney
    due_date: date
    is_recurring: bool = False
    frequency: Frequency | None = None
    category: str | None = Field(default=None, max_length=60)
    auto_pay: bool = False


class PayBillRequest(BaseModel):
    amount: PositiveMoney
    paid_at: datetime | None = None
    notes: str | None = Field(default=None, max_length=240)


class BillCreatedResponse(BaseModel):
    id: uuid.UUID


class BillPaidResponse(BaseModel):
    payment_id: uuid.UUID


class BillListItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    amount: Money
    due_date: date
    days_until_due: int
    status: BillStatus
    is_recurring: bool
    frequency: Frequency | None
    category: str | None
    auto_pay: bool


class BillPaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    paid_at: datetime
    amount: Money
    notes: str | None


class BillDetailsResponse(BillListItemResponse):
    is_active: bool
    created_at: datetime
    last_paid_at: datetime | None
    payments: list[BillPaymentResponse]
