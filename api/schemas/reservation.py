# api/schemas/reservation.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class ReservationCreate(BaseModel):
    book_id: int
    # Librarians may reserve on behalf of a member; members reserve for themselves
    user_id: Optional[str] = None


class Reservation(BaseModel):
    id: int
    book_id: Optional[int] = None
    user_id: str
    reservation_date: datetime
    expiration_date: datetime
    state: str
    loan_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ExpireResult(BaseModel):
    expired: int
