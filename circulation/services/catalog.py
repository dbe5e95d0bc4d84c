# circulation/services/catalog.py
from datetime import date
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from circulation.errors import HasActiveLoans, InvalidRequest, IsbnConflict, NotFound
from circulation.sa.database import Database
from circulation.sa.models import Book, ReservationState
from circulation.sa.repositories import BookRepository, LoanRepository, ReservationRepository
from circulation.services.inventory import InventoryCoordinator

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"title", "author", "category", "publication_date", "description", "total_copies", "isbn"}
REQUIRED_TEXT_FIELDS = ("title", "author")


def normalize_isbn(isbn: Optional[str]) -> str:
    """Strip whitespace and hyphens so that formatting differences do not defeat uniqueness"""
    return "".join(ch for ch in (isbn or "") if ch not in "- \t").upper()


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise InvalidRequest(f"publication_date must be an ISO date, got {value!r}")


def _check_copies(total_copies: Any) -> int:
    if not isinstance(total_copies, int) or isinstance(total_copies, bool) or total_copies < 0:
        raise InvalidRequest(f"total_copies must be a non-negative integer, got {total_copies!r}")
    return total_copies


def _check_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"{field} is required")
    return value.strip()


class CatalogService:
    """Book records. Copy counters are only changed through the inventory coordinator."""

    def __init__(self, database: Database, inventory: InventoryCoordinator):
        self.database = database
        self.inventory = inventory

    def create_book(
        self,
        isbn: str,
        title: str,
        author: str,
        category: Optional[str] = None,
        publication_date: Any = None,
        description: Optional[str] = None,
        total_copies: int = 1
    ) -> Book:
        """Add a book; every copy of a new book starts out available.

        Raises:
            InvalidRequest: missing fields or negative copy count
            IsbnConflict: the ISBN is already catalogued
        """
        normalized = normalize_isbn(isbn)
        if not normalized:
            raise InvalidRequest("isbn is required")
        book = Book(
            isbn=normalized,
            title=_check_text("title", title),
            author=_check_text("author", author),
            category=(category or "").strip() or None,
            publication_date=_parse_date(publication_date),
            description=description,
            total_copies=_check_copies(total_copies),
            available_copies=total_copies,
        )
        with self.database.get_db() as session:
            repo = BookRepository(session)
            if repo.get_by_isbn(normalized) is not None:
                raise IsbnConflict(normalized)
            try:
                repo.add(book)
            except IntegrityError:
                raise IsbnConflict(normalized)
            logger.info("Book %s created: %r (%d copies)", book.id, book.title, book.total_copies)
            return book

    def update_book(self, book_id: object, patch: Dict[str, Any]) -> Book:
        """Edit a book. A new ``total_copies`` shifts availability by the same delta.

        Raises:
            NotFound: unknown book
            InvalidRequest: unknown or non-editable field, bad value
            IsbnConflict: attempt to change the ISBN
        """
        unknown = set(patch) - EDITABLE_FIELDS
        if unknown:
            raise InvalidRequest(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        def work(session: Session) -> Book:
            book = BookRepository(session).get_for_update(book_id)
            if book is None:
                raise NotFound("Book", book_id)

            if "isbn" in patch and normalize_isbn(patch["isbn"]) != book.isbn:
                raise IsbnConflict(patch["isbn"], f"ISBN of book {book.id} is immutable ({book.isbn})")
            if "total_copies" in patch and patch["total_copies"] != book.total_copies:
                self.inventory.resize_total(session, book.id, _check_copies(patch["total_copies"]))

            for field in REQUIRED_TEXT_FIELDS:
                if field in patch:
                    setattr(book, field, _check_text(field, patch[field]))
            if "category" in patch:
                book.category = (patch["category"] or "").strip() or None
            if "publication_date" in patch:
                book.publication_date = _parse_date(patch["publication_date"])
            if "description" in patch:
                book.description = patch["description"]
            session.flush()
            return book

        book = self.inventory.run(book_id, work)
        logger.info("Book %s updated (%s)", book.id, ", ".join(sorted(patch)) or "no changes")
        return book

    def delete_book(self, book_id: object) -> None:
        """Remove a book that has no active loans; its pending reservations are cancelled.

        Raises:
            NotFound: unknown book
            HasActiveLoans: at least one copy is out
        """
        def work(session: Session) -> int:
            book = BookRepository(session).get_for_update(book_id)
            if book is None:
                raise NotFound("Book", book_id)
            active = LoanRepository(session).count_active_for_book(book.id)
            if active:
                logger.info("Refusing to delete book %s with %d active loan(s)", book.id, active)
                raise HasActiveLoans(book.id, active)
            pending = ReservationRepository(session).list_pending_for_book(book.id)
            for reservation in pending:
                reservation.state = ReservationState.CANCELLED.value
            session.flush()
            BookRepository(session).delete(book)
            return len(pending)

        cancelled = self.inventory.run(book_id, work)
        logger.info("Book %s deleted, %d pending reservation(s) cancelled", book_id, cancelled)

    def get_book(self, book_id: object) -> Book:
        with self.database.get_db() as session:
            book = BookRepository(session).get_by_id(book_id)
            if book is None:
                raise NotFound("Book", book_id)
            return book

    def list_books(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        available_only: bool = False
    ) -> List[Book]:
        with self.database.get_db() as session:
            return BookRepository(session).search(
                query=search, category=category, available_only=available_only
            )

    def list_categories(self) -> List[str]:
        with self.database.get_db() as session:
            return BookRepository(session).list_categories()
