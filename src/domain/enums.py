"""Enumerations shared by models, services and API schemas.

Members are string enums whose value equals their name, so they are stored
and serialized exactly as clients send them.
"""

from enum import StrEnum


class AccountType(StrEnum):
    """Kind of financial account."""

    CHECKING = "Checking"
    SAVINGS = "Savings"
    CREDIT = "Credit"
    INVESTMENT = "Investment"
    CASH = "Cash"


class TransactionType(StrEnum):
    """Kind of money movement recorded against an account."""

    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER_IN = "TransferIn"
    TRANSFER_OUT = "TransferOut"
    PAYMENT = "Payment"
    WITHDRAWAL = "Withdrawal"
    DEPOSIT = "Deposit"


class Frequency(StrEnum):
    """How often a recurring bill comes due."""

    WEEKLY = "Weekly"
    BI_WEEKLY = "BiWeekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    YEARLY = "Yearly"
    CUSTOM = "Custom"


class BillStatus(StrEnum):
    """Where a bill stands relative to its due date."""

    PENDING = "Pending"
    DUE_SOON = "DueSoon"
    OVERDUE = "Overdue"
