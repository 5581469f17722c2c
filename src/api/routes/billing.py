"""Bill endpoints."""

import uuid

from fastapi import APIRouter, status

from src.api.dependencies import (
    BillCommandServiceDep,
    BillQueryServiceDep,
    CurrentUserDep,
)
from src.api.schemas.billing import (
    BillCreatedResponse,
    BillDetailsResponse,
    BillListItemResponse,
    BillPaidResponse,
    CreateBillRequest,
    PayBillRequest,
)

router = APIRouter(prefix="/billing", tags=["billing"])


@router.get("/upcoming")
async def upcoming_bills(
    user: CurrentUserDep, bills: BillQueryServiceDep, days: int = 30
) -> list[BillListItemResponse]:
    """Active bills due within ``days`` (non-positive means 30, capped at 90)."""
    return [
        BillListItemResponse.model_validate(item)
        for item in await bills.upcoming(user.id, days)
    ]


@router.get("/overdue")
async def overdue_bills(
    user: CurrentUserDep, bills: BillQueryServiceDep
) -> list[BillListItemResponse]:
    return [
        BillListItemResponse.model_validate(item)
        for item in await bills.overdue(user.id)
    ]


@router.post("/bills", status_code=status.HTTP_201_CREATED)
async def create_bill(
    body: CreateBillRequest, user: CurrentUserDep, bills: BillCommandServiceDep
) -> BillCreatedResponse:
    bill_id = await bills.create(
        user.id,
        name=body.name,
        amount=body.amount,
        due_date=body.due_date,
        is_recurring=body.is_recurring,
        frequency=body.frequency,
        category=body.category,
        auto_pay=body.auto_pay,
    )
    return BillCreatedResponse(id=bill_id)


@router.get("/bills/{bill_id}")
async def bill_details(
    bill_id: uuid.UUID, user: CurrentUserDep, bills: BillQueryServiceDep
) -> BillDetailsResponse:
    return BillDetailsResponse.model_validate(await bills.details(user.id, bill_id))


@router.post("/bills/{bill_id}/pay")
async def pay_bill(
    bill_id: uuid.UUID,
    body: PayBillRequest,
    user: CurrentUserDep,
    bills: BillCommandServiceDep,
) -> BillPaidResponse:
    payment_id = await bills.pay(
        user.id, bill_id, amount=body.amount, paid_at=body.paid_at, notes=body.notes
    )
    return BillPaidResponse(payment_id=payment_id)
