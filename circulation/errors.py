# circulation/errors.py
"""Error taxonomy of the circulation engine.

Every rejection the engine produces is a ``CirculationError`` subclass with a
stable ``kind`` string. Adapters map the kind onto their own transport codes.
"""
from typing import Optional


class CirculationError(Exception):
    """Base class for all expected, caller-recoverable engine errors"""
    kind = "CirculationError"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def __str__(self) -> str:
        return self.message


class NotFound(CirculationError):
    kind = "NotFound"

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} {entity_id!r} not found")
        self.entity = entity
        self.entity_id = entity_id


class OutOfStock(CirculationError):
    kind = "OutOfStock"

    def __init__(self, book_id: int):
        super().__init__(f"No available copies of book {book_id}")
        self.book_id = book_id


class AlreadyReturned(CirculationError):
    kind = "AlreadyReturned"

    def __init__(self, loan_id: int):
        super().__init__(f"Loan {loan_id} has already been returned")
        self.loan_id = loan_id


class AlreadyBorrowed(CirculationError):
    kind = "AlreadyBorrowed"

    def __init__(self, user_id: str, book_id: int):
        super().__init__(f"User {user_id} already has book {book_id} on loan")
        self.user_id = user_id
        self.book_id = book_id


class DuplicateReservation(CirculationError):
    kind = "DuplicateReservation"

    def __init__(self, user_id: str, book_id: int):
        super().__init__(f"User {user_id} already has a pending reservation for book {book_id}")
        self.user_id = user_id
        self.book_id = book_id


class ReservationLimitExceeded(CirculationError):
    kind = "ReservationLimitExceeded"

    def __init__(self, user_id: str, limit: int):
        super().__init__(f"User {user_id} already holds {limit} pending reservations")
        self.user_id = user_id
        self.limit = limit


class HasActiveLoans(CirculationError):
    kind = "HasActiveLoans"

    def __init__(self, book_id: int, active_loans: int):
        super().__init__(f"Book {book_id} has {active_loans} active loan(s) and cannot be deleted")
        self.book_id = book_id
        self.active_loans = active_loans


class IsbnConflict(CirculationError):
    kind = "IsbnConflict"

    def __init__(self, isbn: str, message: Optional[str] = None):
        super().__init__(message or f"A book with ISBN {isbn} already exists")
        self.isbn = isbn


class InventoryInconsistent(CirculationError):
    """Counter invariant violated. Indicates a bug or a broken transaction boundary."""
    kind = "InventoryInconsistent"


class ConcurrencyConflict(CirculationError):
    kind = "ConcurrencyConflict"

    def __init__(self, book_id: int, attempts: int):
        super().__init__(f"Gave up updating book {book_id} after {attempts} conflicting attempts")
        self.book_id = book_id
        self.attempts = attempts


class InvalidState(CirculationError):
    kind = "InvalidState"


class InvalidRequest(CirculationError):
    kind = "InvalidRequest"


class Forbidden(CirculationError):
    kind = "Forbidden"
