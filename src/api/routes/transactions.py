"""Transaction endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query, status

from src.api.dependencies import CurrentUserDep, TransactionServiceDep
from src.api.schemas.transactions import (
    CreateTransactionRequest,
    TransactionResponse,
    TransactionSummaryResponse,
    UpdateTransactionRequest,
)
from src.infrastructure.database.models import Transaction

router = APIRouter(prefix="/transactions", tags=["transactions"])


def _to_response(transactions: list[Transaction]) -> list[TransactionResponse]:
    return [TransactionResponse.model_validate(t) for t in transactions]


@router.get("")
async def list_transactions(
    user: CurrentUserDep, transactions: TransactionServiceDep
) -> list[TransactionResponse]:
    """The user's transactions, newest first."""
    return _to_response(await transactions.list_for_user(user.id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    body: CreateTransactionRequest,
    user: CurrentUserDep,
    transactions: TransactionServiceDep,
) -> TransactionResponse:
    transaction = await transactions.create(
        user.id,
        account_id=body.account_id,
        amount=body.amount,
        type=body.type,
        description=body.description,
        timestamp=body.timestamp,
    )
    return TransactionResponse.model_validate(transaction)


@router.get("/summary")
async def transaction_summary(
    user: CurrentUserDep,
    transactions: TransactionServiceDep,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> TransactionSummaryResponse:
    summary = await transactions.summary(user.id, start_date, end_date)
    return TransactionSummaryResponse.model_validate(summary)


@router.get("/date-range")
async def transactions_between(
    user: CurrentUserDep,
    transactions: TransactionServiceDep,
    start_date: Annotated[datetime, Query()],
    end_date: Annotated[datetime, Query()],
) -> list[TransactionResponse]:
    """Transactions with ``start_date <= timestamp <= end_date``."""
    return _to_response(await transactions.list_between(user.id, start_date, end_date))


@router.get("/account/{account_id}")
async def account_transactions(
    account_id: int, user: CurrentUserDep, transactions: TransactionServiceDep
) -> list[TransactionResponse]:
    return _to_response(await transactions.list_for_account(user.id, account_id))


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: int, user: CurrentUserDep, transactions: TransactionServiceDep
) -> TransactionResponse:
    return TransactionResponse.model_validate(
        await transactions.get(user.id, transaction_id)
    )


@router.put("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_transaction(
    transaction_id: int,
    body: UpdateTransactionRequest,
    user: CurrentUserDep,
    transactions: TransactionServiceDep,
) -> None:
    await transactions.update(
        user.id,
        transaction_id,
        amount=body.amount,
        type=body.type,
        description=body.description,
        timestamp=body.timestamp,
    )


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: int, user: CurrentUserDep, transactions: TransactionServiceDep
) -> None:
    await transactions.delete(user.id, transaction_id)
