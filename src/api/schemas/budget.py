"""Budget summary response model."""

from datetime import date

from pydantic import BaseModel, ConfigDict

from src.api.schemas.common import Money


class MonthlyBreakdownResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    income: Money
    expense: Money


class CategorySpendResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    amount: Money


class BudgetSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    from_date: date
    to_date: date
    total_income: Money
    total_expenses: Money
    net: Money
    monthly: list[MonthlyBreakdownResponse]
    top_categories: list[CategorySpendResponse]
