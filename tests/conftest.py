# tests/conftest.py
import os
import sys
import pytest
from pathlib import Path
from sqlalchemy.sql import text
from datetime import datetime, UTC, timedelta

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from circulation import Actor, LibrarySystem, Role
from circulation.config import CirculationPolicy
from circulation.sa.database import Database
from circulation.sa.models import Base, Book, Loan, LoanState
from circulation.services.inventory import LockRegistry


class FakeClock:
    """Settable clock handed to the engine in place of the wall clock"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory):
    """Create a temporary directory for the test database."""
    test_dir = tmp_path_factory.mktemp("test_db")
    return str(test_dir / "test_circulation.db")


@pytest.fixture(scope="session")
def database(test_db_path):
    """Create a test database instance backed by a file so threads share it"""
    db = Database(f"sqlite:///{test_db_path}")

    Base.metadata.drop_all(db.engine)
    Base.metadata.create_all(db.engine)

    yield db

    db.dispose()
    try:
        os.remove(test_db_path)
    except OSError:
        pass


@pytest.fixture(autouse=True)
def cleanup_db(database):
    """Clean up database tables before each test"""
    with database.engine.begin() as conn:
        conn.execute(text("DELETE FROM reservation"))
        conn.execute(text("DELETE FROM loan"))
        conn.execute(text("DELETE FROM book"))
    yield


@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test"""
    session = database.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=UTC))


@pytest.fixture
def policy():
    return CirculationPolicy(
        loan_period_days=14,
        reservation_days=7,
        max_pending_reservations=3,
    )


@pytest.fixture
def system(database, clock, policy):
    """Engine wired to the test database, with a private lock registry"""
    return LibrarySystem(database=database, policy=policy, clock=clock, locks=LockRegistry())


@pytest.fixture
def librarian():
    return Actor(user_id="librarian-1", role=Role.LIBRARIAN)


@pytest.fixture
def member():
    return Actor(user_id="student-1", role=Role.MEMBER)


@pytest.fixture
def other_member():
    return Actor(user_id="student-2", role=Role.MEMBER)


@pytest.fixture
def sample_book(db_session):
    """Create a sample book with two copies."""
    book = Book(
        isbn="9780140328721",
        title="Matilda",
        author="Roald Dahl",
        category="Fiction",
        total_copies=2,
        available_copies=2,
    )
    db_session.add(book)
    db_session.commit()
    return book


@pytest.fixture
def single_copy_book(db_session):
    """Create a book the library owns exactly one copy of."""
    book = Book(
        isbn="9780064400558",
        title="Charlotte's Web",
        author="E. B. White",
        category="Fiction",
        total_copies=1,
        available_copies=1,
    )
    db_session.add(book)
    db_session.commit()
    return book


@pytest.fixture
def multiple_books(db_session):
    """Create multiple books for testing."""
    books = []
    for i in range(5):
        book = Book(
            isbn=f"97800000000{i:02d}",
            title=f"Test Book {i}",
            author=f"Author {i % 2}",
            category="Science" if i % 2 else "History",
            total_copies=i,
            available_copies=i,
        )
        db_session.add(book)
        books.append(book)
    db_session.commit()
    return books


@pytest.fixture
def make_loan(db_session):
    """Insert a loan row directly, bypassing the counters."""
    def _make_loan(book, user_id="student-1", loan_date=None, days=14, state=LoanState.ACTIVE.value):
        loan_date = loan_date or datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
        loan = Loan(
            book_id=book.id,
            user_id=user_id,
            loan_date=loan_date,
            due_date=loan_date + timedelta(days=days),
            state=state,
        )
        db_session.add(loan)
        db_session.commit()
        return loan
    return _make_loan
