# circulation/services/inventory.py
"""Inventory coordinator: the only code that writes a book's copy counters.

Every counter change runs inside ``InventoryCoordinator.run``, which holds a
per-book lock for the whole unit of work and retries when the book's
optimistic version check fails. The ledgers pass the session they receive
from ``run`` back into ``adjust_available`` / ``resize_total``.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Iterator, TypeVar
import logging
import threading

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from circulation.errors import (
    ConcurrencyConflict, InvalidRequest, InventoryInconsistent, NotFound, OutOfStock
)
from circulation.sa.database import Database
from circulation.sa.models import Book
from circulation.sa.repositories import BookRepository, LoanRepository
from circulation.sa.repositories.base import coerce_id

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LockRegistry:
    """Process-wide mutexes keyed by an arbitrary hashable (book id, user id)"""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}

    def lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        lock = self.lock_for(key)
        with lock:
            yield


# Shared by every coordinator in the process so that separately built
# engines (one per worker, one per test client) still exclude each other.
default_locks = LockRegistry()


@dataclass(frozen=True)
class InventoryReport:
    book_id: int
    total_copies: int
    available_copies: int
    active_loans: int
    withdrawn_on_loan: int = 0

    @property
    def consistent(self) -> bool:
        return self.available_copies == self.total_copies - self.active_loans + self.withdrawn_on_loan

    @property
    def in_bounds(self) -> bool:
        return 0 <= self.available_copies <= self.total_copies


class InventoryCoordinator:
    def __init__(
        self,
        database: Database,
        max_retries: int = 3,
        locks: LockRegistry | None = None
    ):
        self.database = database
        self.max_retries = max(1, max_retries)
        self.locks = locks or default_locks

    def run(self, book_id: object, work: Callable[[Session], T]) -> T:
        """Run ``work`` as one transaction while holding the book's lock.

        Args:
            book_id: Book whose counters ``work`` may touch
            work: Callable receiving the session; its return value is passed through

        Returns:
            Whatever ``work`` returned, after the transaction committed

        Raises:
            NotFound: the id cannot be a book id
            ConcurrencyConflict: the version check kept failing
        """
        key = coerce_id(book_id)
        if key is None:
            raise NotFound("Book", book_id)

        attempt = 0
        while True:
            attempt += 1
            try:
                with self.locks.hold(key):
                    with self.database.get_db() as session:
                        return work(session)
            except StaleDataError:
                if attempt >= self.max_retries:
                    logger.error("Book %s: version conflict persisted after %d attempts", key, attempt)
                    raise ConcurrencyConflict(key, attempt)
                logger.warning("Book %s: version conflict on attempt %d, retrying", key, attempt)

    def _load(self, session: Session, book_id: object) -> Book:
        book = BookRepository(session).get_for_update(book_id)
        if book is None:
            raise NotFound("Book", book_id)
        return book

    def adjust_available(self, session: Session, book_id: object, delta: int) -> int:
        """Apply ``delta`` to the available counter, all or nothing.

        Args:
            session: Session handed out by ``run``
            book_id: Book to adjust
            delta: Signed change in available copies

        Returns:
            The new available count

        Raises:
            NotFound: unknown book
            OutOfStock: the counter would drop below zero
            InventoryInconsistent: the counter would exceed total_copies
        """
        book = self._load(session, book_id)
        new_available = book.available_copies + delta
        if new_available < 0:
            logger.info("Book %s: rejected delta %d with %d available", book.id, delta, book.available_copies)
            raise OutOfStock(book.id)
        if new_available > book.total_copies:
            logger.error(
                "Book %s: delta %d would raise available copies to %d above total %d",
                book.id, delta, new_available, book.total_copies
            )
            raise InventoryInconsistent(
                f"Book {book.id} would have {new_available} available copies "
                f"but only owns {book.total_copies}"
            )
        book.available_copies = new_available
        session.flush()
        return new_available

    def resize_total(self, session: Session, book_id: object, new_total: int) -> int:
        """Change the number of owned copies and shift availability by the same delta.

        Availability never drops below zero. Copies already on loan cannot be
        recalled: the shortfall is kept in ``withdrawn_on_loan`` and is absorbed
        by later returns (or by growing the total again).

        Returns:
            The new available count
        """
        if not isinstance(new_total, int) or isinstance(new_total, bool) or new_total < 0:
            raise InvalidRequest(f"total_copies must be a non-negative integer, got {new_total!r}")
        book = self._load(session, book_id)
        delta = new_total - book.total_copies
        new_available = book.available_copies + delta
        if new_available < 0:
            logger.warning(
                "Book %s: shrinking total %d -> %d clamps available copies from %d to 0",
                book.id, book.total_copies, new_total, new_available
            )
            book.withdrawn_on_loan += -new_available
            new_available = 0
        elif delta > 0 and book.withdrawn_on_loan:
            # Added copies first cancel out earlier withdrawals of loaned copies
            restored = min(delta, book.withdrawn_on_loan)
            book.withdrawn_on_loan -= restored
            new_available -= restored
        book.total_copies = new_total
        book.available_copies = new_available
        session.flush()
        return new_available

    def release_copy(self, session: Session, book_id: object) -> int:
        """Put a returned copy back on the shelf.

        A copy that was withdrawn from the total while on loan is consumed
        instead of being shelved.

        Returns:
            The new available count

        Raises:
            InventoryInconsistent: the counter is at its total and nothing was withdrawn
        """
        book = self._load(session, book_id)
        if book.available_copies >= book.total_copies and book.withdrawn_on_loan > 0:
            book.withdrawn_on_loan -= 1
            session.flush()
            logger.info(
                "Book %s: returned copy was withdrawn while on loan, %d withdrawal(s) outstanding",
                book.id, book.withdrawn_on_loan
            )
            return book.available_copies
        return self.adjust_available(session, book.id, +1)

    def audit(self, book_id: object) -> InventoryReport:
        """Compare a book's counters against its active loans"""
        with self.database.get_db() as session:
            book = BookRepository(session).get_by_id(book_id)
            if book is None:
                raise NotFound("Book", book_id)
            active = LoanRepository(session).count_active_for_book(book.id)
            return InventoryReport(
                book_id=book.id,
                total_copies=book.total_copies,
                available_copies=book.available_copies,
                active_loans=active,
                withdrawn_on_loan=book.withdrawn_on_loan,
            )
