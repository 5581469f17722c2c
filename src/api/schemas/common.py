"""Field types shared across resource schemas."""

from decimal import Decimal
from typing import Annotated, Final

from pydantic import Field, PlainSerializer

# Amounts leave the API as JSON numbers (binary floats), which hold 15
# significant digits exactly. Inputs are capped there so every accepted amount
# round-trips without loss; the columns themselves allow Numeric(18, 2).
MONEY_MAX_DIGITS: Final[int] = 15

_as_json_number = PlainSerializer(float, return_type=float, when_used="json")

Money = Annotated[Decimal, _as_json_number]

PositiveMoney = Annotated[
    Decimal,
    Field(gt=0, max_digits=MONEY_MAX_DIGITS, decimal_places=2),
    _as_json_number,
]
