"""ORM models.

Importing this package registers every table on ``Base.metadata``, which
Alembic relies on for autogeneration.
"""

from src.infrastructure.database.models.account import Account
from src.infrastructure.database.models.bill import Bill, BillPayment
from src.infrastructure.database.models.transaction import Transaction
from src.infrastructure.database.models.user import RefreshToken, Role, User

__all__ = [
    "Account",
    "Bill",
    "BillPayment",
    "RefreshToken",
    "Role",
    "Transaction",
    "User",
]
