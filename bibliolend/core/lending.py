"""
    Lending orchestration for Bibliolend.

    `LendingService` is what the HTTP layer talks to. Each public method
    runs as one transaction on the session it was built with: it commits
    when the operation succeeds and rolls back on any failure, so a
    reservation never outlives a loan row that failed to persist.
    Lock conflicts reported by storage are retried a bounded number of
    times before surfacing as `LendingError.TRANSIENT_STORAGE_CONFLICT`.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional
from sqlalchemy.exc import OperationalError
from bibliolend.configs import LOAN_PERIOD_DAYS, LENDING_MAX_RETRIES, LENDING_RETRY_BACKOFF
from bibliolend.core import overdue
from bibliolend.core.models import Borrower
from bibliolend.core.registry import CopyRegistry, ReserveResult
from bibliolend.core.ledger import LoanLedger, ReturnResult
from bibliolend.core.sanctions import SanctionGate
from bibliolend.core.results import LendingError, Result
from bibliolend.core.exceptions import TransientStorageConflict

logger = logging.getLogger(__name__)

RESERVE_ERRORS = {
    ReserveResult.ALREADY_RESERVED: LendingError.COPY_UNAVAILABLE,
    ReserveResult.NOT_FOUND: LendingError.COPY_NOT_FOUND,
}
RETURN_ERRORS = {
    ReturnResult.NOT_FOUND: LendingError.LOAN_NOT_FOUND,
    ReturnResult.ALREADY_RETURNED: LendingError.LOAN_ALREADY_RETURNED,
}


@dataclass
class BorrowerOverdue:
    borrower_id: int
    overdue_loans: list = field(default_factory=list)
    late_returns: list = field(default_factory=list)
    max_days_overdue: int = 0
    max_days_late: int = 0

    @property
    def severity(self):
        return max(self.max_days_overdue, self.max_days_late)


class LendingService:

    def __init__(self, db, today: Optional[Callable[[], datetime.date]] = None,
                 loan_period_days: int = LOAN_PERIOD_DAYS,
                 max_retries: int = LENDING_MAX_RETRIES,
                 retry_backoff: float = LENDING_RETRY_BACKOFF):
        self.db = db
        self.today = today or datetime.date.today
        self.loan_period_days = loan_period_days
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.registry = CopyRegistry(db)
        self.ledger = LoanLedger(db, self.registry)
        self.sanctions = SanctionGate(db, today=self.today)

    def _transaction(self, operation: Callable[[], Result]) -> Result:
        for attempt in range(self.max_retries + 1):
            try:
                result = operation()
                if result.ok:
                    self.db.commit()
                else:
                    self.db.rollback()
                return result
            except (TransientStorageConflict, OperationalError) as e:
                self.db.rollback()
                logger.warning(f"Storage conflict (attempt {attempt + 1}/{self.max_retries + 1}): {e}")
                if attempt < self.max_retries:
                    time.sleep(self.retry_backoff * (attempt + 1))
            except Exception:
                self.db.rollback()
                raise
        logger.error("Giving up after repeated storage conflicts")
        return Result.failure(LendingError.TRANSIENT_STORAGE_CONFLICT)

    def create_loan(self, borrower_id: int, copy_id: int,
                    date: Optional[datetime.date] = None) -> Result:
        """Lends `copy_id` to `borrower_id`, dated `date` (default today).

        Fails with BORROWER_NOT_FOUND, BORROWER_SANCTIONED, COPY_NOT_FOUND
        or COPY_UNAVAILABLE. A persistence failure after the copy was
        reserved rolls both writes back and raises DatabaseInsertError.
        """
        def operation():
            if not Borrower.exists(self.db, borrower_id):
                return Result.failure(LendingError.BORROWER_NOT_FOUND)
            if self.sanctions.is_in_effect(borrower_id):
                logger.info(f"Borrower {borrower_id} is sanctioned, loan of copy {copy_id} refused")
                return Result.failure(LendingError.BORROWER_SANCTIONED)
            reservation, loan = self.ledger.open_loan(borrower_id, copy_id, date or self.today())
            if loan is None:
                return Result.failure(RESERVE_ERRORS[reservation])
            return Result.success(loan)
        return self._transaction(operation)

    def return_loan(self, loan_id: int) -> Result:
        def operation():
            outcome, loan = self.ledger.close_loan(loan_id, self.today())
            if outcome is not ReturnResult.RETURNED:
                if outcome is ReturnResult.ALREADY_RETURNED:
                    logger.warning(f"Loan {loan_id} returned twice")
                return Result.failure(RETURN_ERRORS[outcome])
            if self.ledger.count_active(loan.borrower_id) == 0:
                if self.sanctions.lift_open_ended(loan.borrower_id):
                    logger.info(f"Borrower {loan.borrower_id} returned every loan, sanction lifted")
            return Result.success(loan)
        return self._transaction(operation)

    def get_loan(self, loan_id: int) -> Result:
        def operation():
            loan = self.ledger.get(loan_id)
            if loan is None:
                return Result.failure(LendingError.LOAN_NOT_FOUND)
            return Result.success(loan)
        return self._transaction(operation)

    def standing(self, loan) -> Optional[overdue.LoanStanding]:
        if loan.return_date is not None:
            return None
        return overdue.classify(loan.loan_date, self.today(), self.loan_period_days)

    def days_late(self, loan) -> int:
        if loan.return_date is None:
            return 0
        return overdue.days_late(loan.loan_date, loan.return_date, self.loan_period_days)

    def _read(self, query: Callable):
        result = self._transaction(lambda: Result.success(query()))
        if not result.ok:
            raise TransientStorageConflict(result.error.message)
        return result.value

    def active_loans(self, borrower_id: Optional[int] = None) -> List:
        return self._read(lambda: self.ledger.active(borrower_id))

    def all_loans(self, borrower_id: Optional[int] = None) -> List:
        return self._read(lambda: self.ledger.history(borrower_id))

    def overdue_report(self) -> List[BorrowerOverdue]:
        """Borrowers with overdue active loans or late returns, worst first."""
        def query():
            today = self.today()
            report = {}
            for loan in self.ledger.active():
                late = overdue.days_overdue(loan.loan_date, today, self.loan_period_days)
                if late > 0:
                    entry = report.setdefault(loan.borrower_id, BorrowerOverdue(loan.borrower_id))
                    entry.overdue_loans.append(loan)
                    entry.max_days_overdue = max(entry.max_days_overdue, late)
            for loan in self.ledger.returned():
                late = self.days_late(loan)
                if late > 0:
                    entry = report.setdefault(loan.borrower_id, BorrowerOverdue(loan.borrower_id))
                    entry.late_returns.append(loan)
                    entry.max_days_late = max(entry.max_days_late, late)
            return sorted(report.values(), key=lambda e: (-e.severity, e.borrower_id))
        return self._read(query)

    # Copies

    def add_copy(self, location: str, book_id: int) -> Result:
        return self._transaction(lambda: Result.success(self.registry.add(location, book_id)))

    def get_copy(self, copy_id: int) -> Result:
        def operation():
            copy = self.registry.get(copy_id)
            if copy is None:
                return Result.failure(LendingError.COPY_NOT_FOUND)
            return Result.success(copy)
        return self._transaction(operation)

    def free_copies(self, book_id: Optional[int] = None) -> List:
        return self._read(lambda: self.registry.free_copies(book_id))

    # Sanctions

    def apply_sanction(self, borrower_id: int, reason: str,
                       duration_days: Optional[int], issued_by: int) -> Result:
        """Sanctions a borrower, overwriting any earlier sanction.

        An open-ended sanction (`duration_days` None) is lifted by the
        borrower's last return, so it is refused with NO_ACTIVE_LOANS when
        there is nothing left to return.
        """
        def operation():
            if not Borrower.exists(self.db, borrower_id):
                return Result.failure(LendingError.BORROWER_NOT_FOUND)
            if duration_days is None and self.ledger.count_active(borrower_id) == 0:
                return Result.failure(LendingError.NO_ACTIVE_LOANS)
            return Result.success(
                self.sanctions.apply(borrower_id, reason, duration_days, issued_by))
        return self._transaction(operation)

    def remove_sanction(self, borrower_id: int) -> Result:
        def operation():
            if not self.sanctions.remove(borrower_id):
                return Result.failure(LendingError.SANCTION_NOT_FOUND)
            return Result.success()
        return self._transaction(operation)

    def get_sanction(self, borrower_id: int) -> Result:
        def operation():
            sanction = self.sanctions.get(borrower_id)
            if sanction is None or not sanction.in_effect_on(self.today()):
                return Result.failure(LendingError.SANCTION_NOT_FOUND)
            return Result.success(sanction)
        return self._transaction(operation)

    def sweep_sanctions(self) -> int:
        return self._read(self.sanctions.sweep_expired)

    def active_sanctions(self) -> List:
        return self._read(self.sanctions.active)
