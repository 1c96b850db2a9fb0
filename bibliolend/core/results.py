"""
    Outcome values for lending operations.

    Expected business outcomes (a copy already on loan, a sanctioned
    borrower, ...) are returned as a `Result` carrying a `LendingError`
    kind, so every caller has to branch on them. Infrastructure failures
    stay exceptions, see `bibliolend.core.exceptions`.
"""

import enum
from dataclasses import dataclass
from typing import Any, Optional


class LendingError(enum.Enum):
    COPY_NOT_FOUND = ("copy_not_found", 404, "This copy does not exist.")
    COPY_UNAVAILABLE = ("copy_unavailable", 409, "This copy is currently loaned.")
    BORROWER_NOT_FOUND = ("borrower_not_found", 404, "This borrower does not exist.")
    BORROWER_SANCTIONED = (
        "borrower_sanctioned", 403,
        "This borrower is sanctioned and cannot borrow until the sanction ends.")
    LOAN_NOT_FOUND = ("loan_not_found", 404, "This loan does not exist.")
    LOAN_ALREADY_RETURNED = ("loan_already_returned", 409, "This loan has already been returned.")
    SANCTION_NOT_FOUND = ("sanction_not_found", 404, "This borrower has no active sanction.")
    NO_ACTIVE_LOANS = (
        "no_active_loans", 409,
        "An open-ended sanction lasts until the borrower's loans are returned, and this borrower has none.")
    TRANSIENT_STORAGE_CONFLICT = (
        "transient_storage_conflict", 503,
        "The library is busy with another request for this item, please try again.")

    def __init__(self, code, status_code, message):
        self.code = code
        self.status_code = status_code
        self.message = message

    def as_dict(self):
        return {"error": self.code, "detail": self.message}


@dataclass(frozen=True)
class Result:
    value: Any = None
    error: Optional[LendingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value=None):
        return cls(value=value)

    @classmethod
    def failure(cls, error: LendingError):
        return cls(error=error)
