"""
    Due-date arithmetic for loans.

    Everything here is a pure function of the dates it is given, so the
    bands can be checked against fixed calendars:

        >>> classify(date(2024, 1, 1), date(2024, 1, 25)).band
        <Band.WARNING: 'warning'>
"""

import enum
from datetime import date, timedelta
from typing import NamedTuple
from bibliolend.configs import LOAN_PERIOD_DAYS

URGENT_DAYS = 3
WARNING_DAYS = 7


class Band(enum.Enum):
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    URGENT = "urgent"
    WARNING = "warning"
    NORMAL = "normal"


class LoanStanding(NamedTuple):
    days_remaining: int
    band: Band

    @property
    def days_overdue(self) -> int:
        return max(0, -self.days_remaining)


def due_date(loan_date: date, loan_period_days: int = LOAN_PERIOD_DAYS) -> date:
    return loan_date + timedelta(days=loan_period_days)


def days_remaining(loan_date: date, today: date, loan_period_days: int = LOAN_PERIOD_DAYS) -> int:
    """Whole days until the loan is due; negative once it is overdue."""
    return (due_date(loan_date, loan_period_days) - today).days


def band_for(remaining: int) -> Band:
    if remaining < 0:
        return Band.OVERDUE
    if remaining == 0:
        return Band.DUE_TODAY
    if remaining <= URGENT_DAYS:
        return Band.URGENT
    if remaining <= WARNING_DAYS:
        return Band.WARNING
    return Band.NORMAL


def classify(loan_date: date, today: date, loan_period_days: int = LOAN_PERIOD_DAYS) -> LoanStanding:
    remaining = days_remaining(loan_date, today, loan_period_days)
    return LoanStanding(remaining, band_for(remaining))


def days_overdue(loan_date: date, today: date, loan_period_days: int = LOAN_PERIOD_DAYS) -> int:
    return classify(loan_date, today, loan_period_days).days_overdue


def days_late(loan_date: date, return_date: date, loan_period_days: int = LOAN_PERIOD_DAYS) -> int:
    """How many days after its deadline a returned loan came back, 0 if on time."""
    return max(0, (return_date - due_date(loan_date, loan_period_days)).days)
