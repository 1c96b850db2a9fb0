#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_overdue
    ~~~~~~~~~~~~~~~~~~

    Due-date arithmetic and standing bands against fixed calendars.
"""

from datetime import date, timedelta
import pytest
from bibliolend.core import overdue
from bibliolend.core.overdue import Band

LOANED = date(2024, 1, 1)
DUE = date(2024, 1, 31)


def test_warning_band_example():
    standing = overdue.classify(LOANED, date(2024, 1, 25), loan_period_days=30)
    assert standing.days_remaining == 6
    assert standing.band is Band.WARNING


def test_due_date_is_loan_date_plus_period():
    assert overdue.due_date(LOANED) == DUE
    assert overdue.due_date(LOANED, 14) == date(2024, 1, 15)


@pytest.mark.parametrize("days_before_due, band", [
    (-5, Band.OVERDUE),
    (-1, Band.OVERDUE),
    (0, Band.DUE_TODAY),
    (1, Band.URGENT),
    (3, Band.URGENT),
    (4, Band.WARNING),
    (7, Band.WARNING),
    (8, Band.NORMAL),
    (30, Band.NORMAL),
])
def test_band_edges(days_before_due, band):
    today = DUE - timedelta(days=days_before_due)
    standing = overdue.classify(LOANED, today)
    assert standing.days_remaining == days_before_due
    assert standing.band is band


def test_days_overdue():
    assert overdue.days_overdue(LOANED, date(2024, 2, 10)) == 10
    assert overdue.days_overdue(LOANED, DUE) == 0
    assert overdue.days_overdue(LOANED, date(2024, 1, 2)) == 0


def test_days_late_for_returned_loans():
    assert overdue.days_late(LOANED, date(2024, 2, 5)) == 5
    assert overdue.days_late(LOANED, DUE) == 0
    assert overdue.days_late(LOANED, date(2024, 1, 10)) == 0


def test_custom_period():
    standing = overdue.classify(LOANED, LOANED, loan_period_days=14)
    assert standing == (14, Band.NORMAL)


def test_classify_is_deterministic():
    today = date(2024, 3, 1)
    assert overdue.classify(LOANED, today) == overdue.classify(LOANED, today)
    assert overdue.classify(LOANED, today).days_overdue == 30
