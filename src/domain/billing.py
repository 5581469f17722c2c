"""Due date arithmetic for bills.

All dates are calendar dates in UTC. Month based advancement clamps the day
to the last day of the target month, so a bill due on January 31st moves to
February 28th (or 29th) and a bill due on February 29th moves to February
28th of the following year.
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta

from src.domain.enums import BillStatus, Frequency

DEFAULT_DUE_SOON_THRESHOLD_DAYS = 7

_MONTHS_PER_STEP: dict[Frequency, int] = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.YEARLY: 12,
}
_DAYS_PER_STEP: dict[Frequency, int] = {
    Frequency.WEEKLY: 7,
    Frequency.BI_WEEKLY: 14,
}


@dataclass(frozen=True, slots=True)
class DueDateAssessment:
    """How far away a due date is and what that means for the bill."""

    days_until_due: int
    status: BillStatus


def add_months(value: date, months: int) -> date:
    """Shift ``value`` by whole months, clamping to the end of the month.

    Args:
        value: Starting date.
        months: Number of months to add (may be negative).

    Returns:
        date: The shifted date.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_due_date(due_date: date, frequency: Frequency | None) -> date:
    """Advance a recurring bill's due date by one period.

    A bill without a frequency is treated as monthly. ``Custom`` schedules
    are managed by the user and are left unchanged.

    Args:
        due_date: Current due date.
        frequency: Recurrence frequency of the bill.

    Returns:
        date: The next due date.
    """
    frequency = frequency or Frequency.MONTHLY
    if frequency in _DAYS_PER_STEP:
        return due_date + timedelta(days=_DAYS_PER_STEP[frequency])
    if frequency in _MONTHS_PER_STEP:
        return add_months(due_date, _MONTHS_PER_STEP[frequency])
    return due_date


def days_until(due_date: date, today: date) -> int:
    """Whole days from ``today`` to ``due_date``; negative once overdue."""
    return (due_date - today).days


def classify_due_date(
    days_until_due: int,
    due_soon_threshold_days: int = DEFAULT_DUE_SOON_THRESHOLD_DAYS,
) -> BillStatus:
    """Map a days-until-due count onto a bill status.

    Args:
        days_until_due: Result of ``days_until``.
        due_soon_threshold_days: Largest count still reported as due soon.

    Returns:
        BillStatus: ``Overdue`` below zero, ``DueSoon`` up to the threshold,
        ``Pending`` otherwise.
    """
    if days_until_due < 0:
        return BillStatus.OVERDUE
    if days_until_due <= due_soon_threshold_days:
        return BillStatus.DUE_SOON
    return BillStatus.PENDING


def assess_due_date(
    due_date: date,
    today: date,
    due_soon_threshold_days: int = DEFAULT_DUE_SOON_THRESHOLD_DAYS,
) -> DueDateAssessment:
    """Compute both the day count and the status for a due date."""
    remaining = days_until(due_date, today)
    return DueDateAssessment(
        days_until_due=remaining,
        status=classify_due_date(remaining, due_soon_threshold_days),
    )


def clamp_horizon(days: int, default_days: int, max_days: int) -> int:
    """Normalise a requested look-ahead window.

    Args:
        days: Requested number of days.
        default_days: Used when ``days`` is zero or negative.
        max_days: Upper bound for the window.

    Returns:
        int: Effective window length in days.
    """
    if days <= 0:
        return default_days
    return min(days, max_days)
