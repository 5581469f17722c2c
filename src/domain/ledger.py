"""Balance rules for posting and reversing transactions.

Every transaction type either credits or debits its account. Amounts are
always stored positive; the direction comes from the type. Posting a
transaction applies ``balance_effect`` and removing or editing it applies the
reversal first, so an account balance always equals its opening balance plus
the effects of its live transactions.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from typing import Final

from src.domain.enums import TransactionType

MONEY_QUANTUM: Final[Decimal] = Decimal("0.01")


class Direction(StrEnum):
    """Whether a transaction adds to or takes from the balance."""

    CREDIT = "credit"
    DEBIT = "debit"


CREDIT_TYPES: Final[frozenset[TransactionType]] = frozenset(
    {TransactionType.INCOME, TransactionType.TRANSFER_IN, TransactionType.DEPOSIT}
)
DEBIT_TYPES: Final[frozenset[TransactionType]] = frozenset(
    {
        TransactionType.EXPENSE,
        TransactionType.TRANSFER_OUT,
        TransactionType.PAYMENT,
        TransactionType.WITHDRAWAL,
    }
)


def quantize_money(amount: Decimal) -> Decimal:
    """Round ``amount`` to cents, halves away from zero."""
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def direction_of(transaction_type: TransactionType) -> Direction:
    """Return the balance direction of a transaction type."""
    if transaction_type in CREDIT_TYPES:
        return Direction.CREDIT
    return Direction.DEBIT


def balance_effect(transaction_type: TransactionType, amount: Decimal) -> Decimal:
    """Signed change a transaction makes to its account balance.

    Args:
        transaction_type: Type of the transaction.
        amount: Positive transaction amount.

    Returns:
        Decimal: ``amount`` for credits, ``-amount`` for debits.
    """
    amount = quantize_money(amount)
    if direction_of(transaction_type) is Direction.CREDIT:
        return amount
    return -amount


def reversal_effect(transaction_type: TransactionType, amount: Decimal) -> Decimal:
    """Signed change that undoes ``balance_effect`` for the same transaction."""
    return -balance_effect(transaction_type, amount)
