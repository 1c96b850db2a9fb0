from pydantic import BaseModel
from typing import List, Optional
from datetime import date

class Loan(BaseModel):
    id: int
    loan_date: date
    return_date: Optional[date] = None
    borrower_id: int
    copy_id: int

    class Config:
        from_attributes = True

class LoanStatus(BaseModel):
    loan: Loan
    due_date: date
    days_remaining: Optional[int] = None
    band: Optional[str] = None
    days_late: int = 0

class BorrowerOverdue(BaseModel):
    borrower_id: int
    overdue_loans: List[Loan]
    late_returns: List[Loan]
    max_days_overdue: int
    max_days_late: int

    class Config:
        from_attributes = True
