"""
    Copy availability for Bibliolend.

    The registry is the only writer of `Copy.status`. Every transition is a
    conditional UPDATE guarded by the expected current status, so the check
    and the write happen in one statement: of any number of concurrent
    reservations on a free copy, exactly one UPDATE matches a row.
"""

import enum
import logging
from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.exc import OperationalError
from bibliolend.core.models import Copy, CopyStatus
from bibliolend.core.exceptions import TransientStorageConflict

logger = logging.getLogger(__name__)


class ReserveResult(enum.Enum):
    RESERVED = "reserved"
    ALREADY_RESERVED = "already_reserved"
    NOT_FOUND = "not_found"


class ReleaseResult(enum.Enum):
    RELEASED = "released"
    NOT_FOUND = "not_found"


class CopyRegistry:

    def __init__(self, db):
        self.db = db

    def _swap_status(self, copy_id: int, expected: CopyStatus, new: CopyStatus) -> bool:
        """Compare-and-set on a copy's status. True if this call made the change."""
        stmt = (
            update(Copy)
            .where(Copy.id == copy_id, Copy.status == expected)
            .values(status=new)
            .execution_options(synchronize_session=False)
        )
        try:
            return self.db.execute(stmt).rowcount == 1
        except OperationalError as e:
            raise TransientStorageConflict(
                f"Copy {copy_id} is locked by another request: {e}") from e

    def _exists(self, copy_id: int) -> bool:
        try:
            return self.db.scalar(select(Copy.id).where(Copy.id == copy_id)) is not None
        except OperationalError as e:
            raise TransientStorageConflict(str(e)) from e

    def try_reserve(self, copy_id: int) -> ReserveResult:
        if self._swap_status(copy_id, CopyStatus.FREE, CopyStatus.LOANED):
            logger.info(f"Copy {copy_id} reserved")
            return ReserveResult.RESERVED
        if self._exists(copy_id):
            return ReserveResult.ALREADY_RESERVED
        return ReserveResult.NOT_FOUND

    def release(self, copy_id: int) -> ReleaseResult:
        # A copy that is already free counts as released; retries land here.
        if self._swap_status(copy_id, CopyStatus.LOANED, CopyStatus.FREE):
            logger.info(f"Copy {copy_id} released")
            return ReleaseResult.RELEASED
        if self._exists(copy_id):
            return ReleaseResult.RELEASED
        return ReleaseResult.NOT_FOUND

    def status_of(self, copy_id: int) -> Optional[CopyStatus]:
        return self.db.scalar(select(Copy.status).where(Copy.id == copy_id))

    def get(self, copy_id: int) -> Optional[Copy]:
        return self.db.get(Copy, copy_id, populate_existing=True)

    def add(self, location: str, book_id: int) -> Copy:
        copy = Copy(location=location, book_id=book_id, status=CopyStatus.FREE)
        self.db.add(copy)
        self.db.flush()
        logger.info(f"Copy {copy.id} of book {book_id} added at {location!r}")
        return copy

    def free_copies(self, book_id: Optional[int] = None) -> List[Copy]:
        stmt = select(Copy).where(Copy.status == CopyStatus.FREE)
        if book_id is not None:
            stmt = stmt.where(Copy.book_id == book_id)
        return list(self.db.scalars(
            stmt.order_by(Copy.id).execution_options(populate_existing=True)))
