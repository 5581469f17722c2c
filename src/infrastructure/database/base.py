"""SQLAlchemy declarative base and common model fields.

Two abstract models are provided:

- ``BaseModel``: BigInteger autoincrement primary key, used by users,
  accounts and transactions.
- ``UUIDModel``: UUID primary key generated by the application, used by
  bills and bill payments whose identifiers are handed out to clients.

Both carry timezone-aware ``created_at`` / ``updated_at`` columns filled in by
the database.
"""

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, MetaData, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.infrastructure.constants import NAMING_CONVENTION


class Base(DeclarativeBase):
    """Declarative base sharing one metadata with constraint naming rules."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class _TimestampedModel(Base):
    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was created (UTC)",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Timestamp when the record was last updated (UTC)",
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={getattr(self, 'id', None)})>"


class BaseModel(_TimestampedModel):
    """Abstract model with a sequential BigInteger ``id``."""

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
        doc="Primary key with auto-incrementing BigInteger ID",
    )


class UUIDModel(_TimestampedModel):
    """Abstract model with a random UUID ``id`` assigned when first flushed."""

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="Primary key generated with uuid4",
    )
