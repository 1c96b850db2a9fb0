"""
    Loan records for Bibliolend.

    The ledger owns the `loans` table. Opening a loan reserves the copy
    through the `CopyRegistry` before the row is written; closing a loan
    stamps the return date and releases the copy. Neither commits: the
    caller decides the transaction boundary, so both writes of a step
    become visible together or not at all.
"""

import datetime
import enum
import logging
from typing import List, Optional, Tuple
from sqlalchemy import func, select, update
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from bibliolend.core.models import Loan
from bibliolend.core.registry import CopyRegistry, ReserveResult
from bibliolend.core.exceptions import DatabaseInsertError, TransientStorageConflict

logger = logging.getLogger(__name__)


class ReturnResult(enum.Enum):
    RETURNED = "returned"
    NOT_FOUND = "not_found"
    ALREADY_RETURNED = "already_returned"


class LoanLedger:

    def __init__(self, db, registry: CopyRegistry):
        self.db = db
        self.registry = registry

    def record(self, borrower_id: int, copy_id: int, loan_date: datetime.date) -> Loan:
        loan = Loan(borrower_id=borrower_id, copy_id=copy_id, loan_date=loan_date)
        try:
            self.db.add(loan)
            self.db.flush()
        except OperationalError as e:
            raise TransientStorageConflict(str(e)) from e
        except SQLAlchemyError as e:
            raise DatabaseInsertError(f"Failed to create loan record: {str(e)}.") from e
        return loan

    def open_loan(self, borrower_id: int, copy_id: int,
                  loan_date: datetime.date) -> Tuple[ReserveResult, Optional[Loan]]:
        reservation = self.registry.try_reserve(copy_id)
        if reservation is not ReserveResult.RESERVED:
            return reservation, None
        loan = self.record(borrower_id, copy_id, loan_date)
        logger.info(f"Loan {loan.id}: copy {copy_id} to borrower {borrower_id} on {loan_date}")
        return reservation, loan

    def mark_returned(self, loan_id: int, return_date: datetime.date) -> bool:
        """Stamps the return date unless one is already set."""
        stmt = (
            update(Loan)
            .where(Loan.id == loan_id, Loan.return_date == None)
            .values(return_date=return_date)
            .execution_options(synchronize_session=False)
        )
        try:
            return self.db.execute(stmt).rowcount == 1
        except OperationalError as e:
            raise TransientStorageConflict(str(e)) from e

    def close_loan(self, loan_id: int,
                   return_date: datetime.date) -> Tuple[ReturnResult, Optional[Loan]]:
        if not self.mark_returned(loan_id, return_date):
            loan = self.get(loan_id)
            if loan is None:
                return ReturnResult.NOT_FOUND, None
            return ReturnResult.ALREADY_RETURNED, loan
        loan = self.get(loan_id)
        self.registry.release(loan.copy_id)
        logger.info(f"Loan {loan_id} returned on {return_date}, copy {loan.copy_id} released")
        return ReturnResult.RETURNED, loan

    def get(self, loan_id: int) -> Optional[Loan]:
        return self.db.get(Loan, loan_id, populate_existing=True)

    def _query(self, borrower_id: Optional[int] = None, *criteria):
        stmt = select(Loan).where(*criteria)
        if borrower_id is not None:
            stmt = stmt.where(Loan.borrower_id == borrower_id)
        return list(self.db.scalars(
            stmt.order_by(Loan.id).execution_options(populate_existing=True)))

    def active(self, borrower_id: Optional[int] = None) -> List[Loan]:
        return self._query(borrower_id, Loan.return_date == None)

    def history(self, borrower_id: Optional[int] = None) -> List[Loan]:
        return self._query(borrower_id)

    def returned(self, borrower_id: Optional[int] = None) -> List[Loan]:
        return self._query(borrower_id, Loan.return_date != None)

    def count_active(self, borrower_id: int) -> int:
        stmt = select(func.count(Loan.id)).where(
            Loan.borrower_id == borrower_id, Loan.return_date == None)
        return self.db.scalar(stmt)
