# circulation/sa/__init__.py
from .database import Database
from .models import (
    Base, Book, Loan, LoanState, Reservation, ReservationState
)

__all__ = [
    'Database',
    'Base',
    'Book',
    'Loan',
    'LoanState',
    'Reservation',
    'ReservationState',
]
