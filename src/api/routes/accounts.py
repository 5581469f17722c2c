"""Account endpoints."""

from fastapi import APIRouter, status

from src.api.dependencies import AccountServiceDep, CurrentUserDep
from src.api.schemas.accounts import (
    AccountResponse,
    AccountSummaryResponse,
    CreateAccountRequest,
    UpdateAccountRequest,
)

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("")
async def list_accounts(
    user: CurrentUserDep, accounts: AccountServiceDep
) -> list[AccountResponse]:
    return [
        AccountResponse.model_validate(account)
        for account in await accounts.list_for_user(user.id)
    ]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_account(
    body: CreateAccountRequest, user: CurrentUserDep, accounts: AccountServiceDep
) -> AccountResponse:
    account = await accounts.create(
        user.id,
        name=body.name,
        type=body.type,
        initial_balance=body.initial_balance,
        currency=body.currency,
    )
    return AccountResponse.model_validate(account)


# Declared before /{account_id} so "summary" is not parsed as an id
@router.get("/summary")
async def account_summary(
    user: CurrentUserDep, accounts: AccountServiceDep
) -> AccountSummaryResponse:
    return AccountSummaryResponse.model_validate(await accounts.summary(user.id))


@router.get("/{account_id}")
async def get_account(
    account_id: int, user: CurrentUserDep, accounts: AccountServiceDep
) -> AccountResponse:
    return AccountResponse.model_validate(await accounts.get(user.id, account_id))


@router.put("/{account_id}")
async def update_account(
    account_id: int,
    body: UpdateAccountRequest,
    user: CurrentUserDep,
    accounts: AccountServiceDep,
) -> AccountResponse:
    account = await accounts.update(
        user.id, account_id, name=body.name, type=body.type, currency=body.currency
    )
    return AccountResponse.model_validate(account)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    account_id: int, user: CurrentUserDep, accounts: AccountServiceDep
) -> None:
    await accounts.delete(user.id, account_id)
