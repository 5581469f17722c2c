"""Column types shared by several models."""

from enum import StrEnum

from sqlalchemy import Enum, Numeric

from src.infrastructure.constants import MONEY_PRECISION, MONEY_SCALE


def string_enum[E: StrEnum](enum_class: type[E], name: str) -> Enum:
    """Store a ``StrEnum`` as its value in a VARCHAR column with a CHECK.

    Args:
        enum_class: Enum to persist.
        name: Name of the generated CHECK constraint.

    Returns:
        Enum: Column type for ``mapped_column``.
    """
    return Enum(
        enum_class,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=20,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


def money() -> Numeric:
    """Fixed point column for currency amounts."""
    return Numeric(MONEY_PRECISION, MONEY_SCALE, asdecimal=True)
