from pydantic import BaseModel
from typing import Optional
from datetime import date

class Sanction(BaseModel):
    borrower_id: int
    reason: str
    applied_date: date
    expiration_date: Optional[date] = None
    issued_by: int
    is_active: bool
    days_remaining: Optional[int] = None

    class Config:
        from_attributes = True
