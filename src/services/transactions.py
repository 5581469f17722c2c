"""Transaction posting with balance-consistent ledger updates.

Creating a transaction applies its balance effect to the account, editing
one reverses the old effect before applying the new one, and deleting one
reverses its effect. The account row is locked for the duration of the
request whenever its balance changes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Final

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError, ValidationError
from src.core.observability import trace_operation
from src.domain import clock
from src.domain.enums import TransactionType
from src.domain.ledger import (
    Direction,
    balance_effect,
    direction_of,
    quantize_money,
    reversal_effect,
)
from src.infrastructure.database.models import Account, Transaction
from src.infrastructure.repositories import AccountRepository, TransactionRepository
from src.infrastructure.repositories.transactions import TransactionTypeTotal

# Allowance for client clocks running slightly ahead of the server
MAX_FUTURE_SKEW: Final[timedelta] = timedelta(minutes=2)


@dataclass(frozen=True, slots=True)
class TransactionSummary:
    total_transactions: int
    total_income: Decimal
    total_expenses: Decimal
    net_amount: Decimal
    start_date: datetime | None
    end_date: datetime | None
    transactions_by_type: list[TransactionTypeTotal] = field(default_factory=list)


def _validate_amount(amount: Decimal) -> Decimal:
    if amount <= 0:
        raise ValidationError(
            "Amount must be greater than zero", context={"amount": str(amount)}
        )
    return quantize_money(amount)


def _resolve_timestamp(timestamp: datetime | None) -> datetime:
    now = clock.utc_now()
    if timestamp is None:
        return now
    occurred_at = clock.ensure_utc(timestamp)
    if occurred_at > now + MAX_FUTURE_SKEW:
        raise ValidationError(
            "Transaction timestamp cannot be in the future",
            context={"timestamp": occurred_at.isoformat()},
        )
    return occurred_at


def _validate_range(start: datetime | None, end: datetime | None) -> None:
    if start is not None and end is not None and start > end:
        raise ValidationError(
            "Start date must be on or before end date",
            context={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )


class TransactionService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.accounts = AccountRepository(session)
        self.transactions = TransactionRepository(session)

    async def _locked_account(self, user_id: int, account_id: int) -> Account:
        account = await self.accounts.get_for_user(account_id, user_id, for_update=True)
        if account is None:
            raise NotFoundError(
                f"Account {account_id} not found", context={"account_id": account_id}
            )
        return account

    async def create(
        self,
        user_id: int,
        *,
        account_id: int,
        amount: Decimal,
        type: TransactionType,  # noqa: A002
        description: str | None = None,
        timestamp: datetime | None = None,
    ) -> Transaction:
        """Record a transaction and move the account balance.

        Args:
            user_id: Owner of the account.
            account_id: Account the transaction belongs to.
            amount: Positive amount.
            type: Transaction type, which decides the balance direction.
            description: Optional free text.
            timestamp: When it happened; defaults to now.

        Returns:
            Transaction: The persisted transaction.

        Raises:
            NotFoundError: If the account is not one of the user's live accounts.
            ValidationError: If the amount or timestamp is invalid.
        """
        amount = _validate_amount(amount)
        occurred_at = _resolve_timestamp(timestamp)

        with trace_operation(
            "ledger.post_transaction", account_id=account_id, type=type.value
        ):
            account = await self._locked_account(user_id, account_id)
            account.balance = account.balance + balance_effect(type, amount)
            transaction = await self.transactions.create(
                Transaction(
                    account_id=account.id,
                    type=type,
                    description=(description or "").strip(),
                    amount=amount,
                    occurred_at=occurred_at,
                    is_deleted=False,
                )
            )

        logger.info(
            "Posted {} of {} to account {}",
            type.value,
            amount,
            account_id,
            user_id=user_id,
            transaction_id=transaction.id,
        )
        return transaction

    async def get(self, user_id: int, transaction_id: int) -> Transaction:
        transaction = await self.transactions.get_for_user(transaction_id, user_id)
        if transaction is None:
            raise NotFoundError(
                f"Transaction {transaction_id} not found",
                context={"transaction_id": transaction_id},
            )
        return transaction

    async def update(
        self,
        user_id: int,
        transaction_id: int,
        *,
        amount: Decimal | None = None,
        type: TransactionType | None = None,  # noqa: A002
        description: str | None = None,
        timestamp: datetime | None = None,
    ) -> Transaction:
        """Edit a transaction, keeping the account balance consistent.

        The old effect is reversed, the provided fields are applied, then the
        new effect is posted.
        """
        transaction = await self.get(user_id, transaction_id)
        new_amount = _validate_amount(amount) if amount is not None else None
        occurred_at = _resolve_timestamp(timestamp) if timestamp is not None else None

        with trace_operation(
            "ledger.repost_transaction", transaction_id=transaction_id
        ):
            account = await self._locked_account(user_id, transaction.account_id)
            account.balance = account.balance + reversal_effect(
                transaction.type, transaction.amount
            )
            transaction = await self.transactions.update(
                transaction,
                {
                    "amount": new_amount,
                    "type": type,
                    "description": (
                        description.strip() if description is not None else None
                    ),
                    "occurred_at": occurred_at,
                },
            )
            account.balance = account.balance + balance_effect(
                transaction.type, transaction.amount
            )
            await self.session.flush()

        return transaction

    async def delete(self, user_id: int, transaction_id: int) -> None:
        """Soft delete a transaction and reverse its balance effect."""
        transaction = await self.get(user_id, transaction_id)
        with trace_operation(
            "ledger.reverse_transaction", transaction_id=transaction_id
        ):
            account = await self._locked_account(user_id, transaction.account_id)
            account.balance = account.balance + reversal_effect(
                transaction.type, transaction.amount
            )
            transaction.is_deleted = True
            await self.session.flush()
        logger.info("Transaction {} deleted", transaction_id, user_id=user_id)

    async def list_for_user(self, user_id: int) -> list[Transaction]:
        return await self.transactions.list_for_user(user_id)

    async def list_for_account(
        self, user_id: int, account_id: int
    ) -> list[Transaction]:
        """Transactions of one account; empty when the account is not the user's."""
        return await self.transactions.list_for_account(account_id, user_id)

    async def list_between(
        self, user_id: int, start: datetime, end: datetime
    ) -> list[Transaction]:
        start, end = clock.ensure_utc(start), clock.ensure_utc(end)
        _validate_range(start, end)
        return await self.transactions.list_for_user(user_id, start, end)

    async def summary(
        self,
        user_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> TransactionSummary:
        """Totals per type plus income, expense and net over an optional range.

        Income counts every credit type and expenses every debit type.
        """
        start = clock.ensure_utc(start) if start is not None else None
        end = clock.ensure_utc(end) if end is not None else None
        _validate_range(start, end)

        by_type = await self.transactions.totals_by_type(user_id, start, end)
        income = expenses = Decimal("0.00")
        for row in by_type:
            if direction_of(row.type) is Direction.CREDIT:
                income += row.total_amount
            else:
                expenses += row.total_amount
        return TransactionSummary(
            total_transactions=sum(row.count for row in by_type),
            total_income=income,
            total_expenses=expenses,
            net_amount=income - expenses,
            start_date=start,
            end_date=end,
            transactions_by_type=by_type,
        )
