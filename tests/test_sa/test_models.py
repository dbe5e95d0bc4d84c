# tests/test_sa/test_models.py
import pytest
from datetime import datetime, UTC, timedelta
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from circulation.sa.models import Book, Loan, LoanState, Reservation, ReservationState


def test_book_creation(db_session, sample_book):
    """Test basic book creation and retrieval"""
    book = db_session.get(Book, sample_book.id)
    assert book.isbn == "9780140328721"
    assert book.title == "Matilda"
    assert book.total_copies == 2
    assert book.available_copies == 2
    assert book.withdrawn_on_loan == 0
    assert book.is_available


def test_book_version_starts_and_increments(db_session, sample_book):
    """Test that every update bumps the optimistic lock version"""
    assert sample_book.version == 1
    sample_book.available_copies = 1
    db_session.commit()
    assert sample_book.version == 2


def test_stale_book_update_is_rejected(database, sample_book):
    """Test that an update based on an outdated version fails"""
    first = database.get_session()
    second = database.get_session()
    try:
        a = first.get(Book, sample_book.id)
        b = second.get(Book, sample_book.id)

        a.available_copies = 1
        first.commit()

        b.available_copies = 0
        with pytest.raises(StaleDataError):
            second.commit()
    finally:
        first.close()
        second.close()


def test_available_cannot_exceed_total(db_session):
    """Test the table constraint keeping available within total"""
    db_session.add(Book(isbn="111", title="Too Many", author="A", total_copies=1, available_copies=2))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_negative_counts_are_rejected(db_session):
    """Test the non-negative constraints"""
    db_session.add(Book(isbn="222", title="Negative", author="A", total_copies=1, available_copies=-1))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_isbn_is_unique(db_session, sample_book):
    """Test that two books cannot share an ISBN"""
    db_session.add(Book(isbn=sample_book.isbn, title="Copy", author="A", total_copies=1, available_copies=1))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_datetimes_come_back_timezone_aware(db_session, sample_book, make_loan):
    """Test that loan dates round-trip as UTC-aware datetimes"""
    loan = make_loan(sample_book)
    db_session.expire_all()
    fetched = db_session.get(Loan, loan.id)
    assert fetched.loan_date.tzinfo is not None
    assert fetched.loan_date == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
    assert fetched.due_date - fetched.loan_date == timedelta(days=14)


def test_loan_fine_property():
    """Test that fines stored as cents are exposed as Decimal"""
    loan = Loan(user_id="u", fine_cents=150)
    assert loan.fine == Decimal("1.50")


def test_loan_is_overdue():
    """Test overdue detection on active and returned loans"""
    due = datetime(2024, 1, 1, tzinfo=UTC)
    loan = Loan(user_id="u", due_date=due, state=LoanState.ACTIVE.value)
    assert loan.is_active
    assert loan.is_overdue(due + timedelta(seconds=1))
    assert not loan.is_overdue(due)

    loan.state = LoanState.RETURNED.value
    assert not loan.is_overdue(due + timedelta(days=3))


def test_reservation_is_past_due():
    """Test that only pending reservations can be past due"""
    expires = datetime(2024, 1, 8, tzinfo=UTC)
    reservation = Reservation(user_id="u", expiration_date=expires, state=ReservationState.PENDING.value)
    assert not reservation.is_past_due(expires - timedelta(minutes=1))
    assert reservation.is_past_due(expires)

    reservation.state = ReservationState.CANCELLED.value
    assert not reservation.is_past_due(expires + timedelta(days=1))


def test_deleting_book_keeps_loan_history(db_session, sample_book, make_loan):
    """Test that loans survive their book with a cleared reference"""
    loan = make_loan(sample_book, state=LoanState.RETURNED.value)
    db_session.delete(sample_book)
    db_session.commit()
    db_session.expire_all()
    assert db_session.get(Loan, loan.id).book_id is None
