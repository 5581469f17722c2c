"""Repositories for each aggregate, built on ``BaseRepository``."""

from src.infrastructure.repositories.accounts import AccountRepository
from src.infrastructure.repositories.bills import BillPaymentRepository, BillRepository
from src.infrastructure.repositories.transactions import TransactionRepository
from src.infrastructure.repositories.users import (
    RefreshTokenRepository,
    RoleRepository,
    UserRepository,
)

__all__ = [
    "AccountRepository",
    "BillPaymentRepository",
    "BillRepository",
    "RefreshTokenRepository",
    "RoleRepository",
    "TransactionRepository",
    "UserRepository",
]
