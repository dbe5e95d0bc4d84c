# circulation/sa/repositories/__init__.py
from .book import BookRepository
from .loan import LoanRepository
from .reservation import ReservationRepository

__all__ = [
    'BookRepository',
    'LoanRepository',
    'ReservationRepository',
]
