import datetime
from pydantic import BaseModel, Field
from typing import Optional

class LoanRequest(BaseModel):
    copy_id: int
    borrower_id: int
    date: Optional[datetime.date] = None

class SanctionRequest(BaseModel):
    borrower_id: int
    reason: str = Field(..., min_length=1, max_length=255)
    duration_days: Optional[int] = Field(None, ge=0)
    issued_by: int

class CopyRequest(BaseModel):
    location: str = Field(..., min_length=1, max_length=100)
    book_id: int
