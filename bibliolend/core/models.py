#!/usr/bin/env python 

"""
    Lending Models for Bibliolend,
    including the Borrower, Copy, Loan and Sanction tables.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from sqlalchemy import (
    Column, String, Boolean, Integer, Date, DateTime, ForeignKey, Index,
    Enum as SQLAlchemyEnum, text
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sqlalchemy.ext.hybrid import hybrid_property
from bibliolend.core.db import Base
import enum


class CopyStatus(enum.Enum):
    FREE = "Free"
    LOANED = "Loaned"


class Borrower(Base):
    __tablename__ = 'borrowers'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())

    @classmethod
    def exists(cls, db, borrower_id):
        return db.get(cls, borrower_id)

    @classmethod
    def create(cls, db, name, email):
        borrower = cls(name=name, email=email)
        db.add(borrower)
        db.flush()
        return borrower


class Copy(Base):
    __tablename__ = 'copies'

    id = Column(Integer, primary_key=True)
    location = Column(String(100), nullable=False)
    status = Column(
        SQLAlchemyEnum(CopyStatus, name='copy_status',
                       values_callable=lambda e: [m.value for m in e]),
        default=CopyStatus.FREE, nullable=False)
    book_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now())

    loans = relationship('Loan', back_populates='copy')


class Loan(Base):
    __tablename__ = 'loans'
    # A copy can be out on at most one loan at a time
    __table_args__ = (
        Index('uq_loans_active_copy', 'copy_id', unique=True,
              sqlite_where=text('return_date IS NULL'),
              postgresql_where=text('return_date IS NULL')),
    )

    id = Column(Integer, primary_key=True)
    loan_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)
    borrower_id = Column(Integer, ForeignKey('borrowers.id'), nullable=False)
    copy_id = Column(Integer, ForeignKey('copies.id'), nullable=False)

    copy = relationship('Copy', back_populates='loans')
    borrower = relationship('Borrower')

    @hybrid_property
    def is_active(self):
        """True while the loan has not been returned."""
        return self.return_date == None


class Sanction(Base):
    __tablename__ = 'sanctions'

    borrower_id = Column(Integer, ForeignKey('borrowers.id'), primary_key=True)
    reason = Column(String(255), nullable=False)
    applied_date = Column(Date, nullable=False)
    # NULL means open-ended: lifted on the borrower's last return
    expiration_date = Column(Date, nullable=True)
    issued_by = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    def in_effect_on(self, today):
        if not self.is_active:
            return False
        return self.expiration_date is None or today <= self.expiration_date
