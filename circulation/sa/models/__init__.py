# circulation/sa/models/__init__.py
from .base import Base, TimestampMixin, UTCDateTime, utcnow
from .book import Book
from .loan import Loan, LoanState
from .reservation import Reservation, ReservationState

__all__ = [
    'Base',
    'TimestampMixin',
    'UTCDateTime',
    'utcnow',
    'Book',
    'Loan',
    'LoanState',
    'Reservation',
    'ReservationState',
]
