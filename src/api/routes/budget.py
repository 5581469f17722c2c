"""Budget summary endpoint."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query

from src.api.dependencies import BudgetSummaryServiceDep, CurrentUserDep
from src.api.schemas.budget import BudgetSummaryResponse

router = APIRouter(tags=["budget"])


@router.get("/budget-summary")
async def budget_summary(
    user: CurrentUserDep,
    budget: BudgetSummaryServiceDep,
    from_date: Annotated[date, Query(alias="from")],
    to_date: Annotated[date, Query(alias="to")],
    account_id: int | None = None,
) -> BudgetSummaryResponse:
    """Income, expenses and net per month between two inclusive dates."""
    summary = await budget.summarize(user.id, from_date, to_date, account_id)
    return BudgetSummaryResponse.model_validate(summary)
