# api/schemas/loan.py
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict


class LoanCreate(BaseModel):
    user_id: str
    book_id: int


class Loan(BaseModel):
    id: int
    book_id: Optional[int] = None
    user_id: str
    loan_date: datetime
    due_date: datetime
    return_date: Optional[datetime] = None
    fine: Decimal
    renewals: int
    state: str

    model_config = ConfigDict(from_attributes=True)
