from pydantic import BaseModel
from datetime import datetime
from typing import Optional

class Copy(BaseModel):
    id: int
    location: str
    status: str
    book_id: int
    updated_at: Optional[datetime] = None
