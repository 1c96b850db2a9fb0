#!/usr/bin/env python

"""
    Core module for Bibliolend: storage, copy registry, loan ledger,
    overdue classification, sanctions and the lending service

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from bibliolend.core import models
from bibliolend.core.lending import LendingService
from bibliolend.core.results import LendingError, Result

__all__ = ["models", "LendingService", "LendingError", "Result"]
