"""
    Borrowing sanctions for Bibliolend.

    One record per borrower; applying a new sanction overwrites the old
    one. Expiry is evaluated lazily against the gate's clock, so a lapsed
    sanction stops blocking loans without anyone running `sweep_expired`.
    Sweeps and removals only ever deactivate records.
"""

import datetime
import logging
from typing import Callable, List, Optional
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from bibliolend.core.models import Sanction
from bibliolend.core.exceptions import TransientStorageConflict

logger = logging.getLogger(__name__)


class SanctionGate:

    def __init__(self, db, today: Callable[[], datetime.date] = datetime.date.today):
        self.db = db
        self.today = today

    def apply(self, borrower_id: int, reason: str, duration_days: Optional[int], issued_by: int) -> Sanction:
        """Sanctions `borrower_id` for `duration_days` days from today.

        A `duration_days` of None makes the sanction open-ended: it holds
        until the borrower has returned every loan, or until removed.

        A first sanction racing another first sanction for the same
        borrower loses on the primary key and raises
        `TransientStorageConflict`; the retry then finds the winner's row
        and overwrites it.
        """
        if duration_days is not None and duration_days < 0:
            raise ValueError(f"duration_days must not be negative, got {duration_days}")
        today = self.today()
        expiration = None
        if duration_days is not None:
            expiration = today + datetime.timedelta(days=duration_days)

        sanction = self.get(borrower_id)
        if sanction is None:
            sanction = Sanction(borrower_id=borrower_id)
            self.db.add(sanction)
        sanction.reason = reason
        sanction.applied_date = today
        sanction.expiration_date = expiration
        sanction.issued_by = issued_by
        sanction.is_active = True
        try:
            self.db.flush()
        except IntegrityError as e:
            raise TransientStorageConflict(f"Borrower {borrower_id} was sanctioned concurrently") from e
        logger.info(f"Borrower {borrower_id} sanctioned by {issued_by} until {expiration or 'all loans are returned'}")
        return sanction

    def get(self, borrower_id: int) -> Optional[Sanction]:
        return self.db.get(Sanction, borrower_id, populate_existing=True)

    def is_in_effect(self, borrower_id: int) -> bool:
        sanction = self.get(borrower_id)
        return sanction is not None and sanction.in_effect_on(self.today())

    def _deactivate(self, *criteria) -> int:
        stmt = (
            update(Sanction)
            .where(Sanction.is_active == True, *criteria)
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def remove(self, borrower_id: int) -> bool:
        removed = self._deactivate(Sanction.borrower_id == borrower_id) > 0
        if removed:
            logger.info(f"Sanction on borrower {borrower_id} removed")
        return removed

    def lift_open_ended(self, borrower_id: int) -> bool:
        return self._deactivate(
            Sanction.borrower_id == borrower_id,
            Sanction.expiration_date == None,
        ) > 0

    def sweep_expired(self) -> int:
        swept = self._deactivate(
            Sanction.expiration_date != None,
            Sanction.expiration_date < self.today(),
        )
        if swept:
            logger.info(f"Swept {swept} expired sanctions")
        return swept

    def active(self) -> List[Sanction]:
        """Sanctions currently in effect."""
        stmt = select(Sanction).where(
            Sanction.is_active == True,
            or_(Sanction.expiration_date == None,
                Sanction.expiration_date >= self.today()),
        ).order_by(Sanction.borrower_id).execution_options(populate_existing=True)
        return list(self.db.scalars(stmt))

    def days_remaining(self, sanction: Optional[Sanction]) -> Optional[int]:
        if sanction is None or sanction.expiration_date is None:
            return None
        return (sanction.expiration_date - self.today()).days
