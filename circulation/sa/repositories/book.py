# circulation/sa/repositories/book.py
from typing import List, Optional
from sqlalchemy import select, or_
from sqlalchemy.orm import Session
from circulation.sa.models import Book
from .base import coerce_id


class BookRepository:
    """Repository for managing Book entities.

    Repositories never commit: the surrounding unit of work decides when the
    transaction ends.
    """

    def __init__(self, session: Session):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_id(self, book_id: object) -> Optional[Book]:
        """Get a book by its ID.

        Args:
            book_id: The ID of the book; malformed values yield None

        Returns:
            The Book object if found, None otherwise
        """
        pk = coerce_id(book_id)
        if pk is None:
            return None
        return self.session.get(Book, pk)

    def get_for_update(self, book_id: object) -> Optional[Book]:
        """Load a book for a counter mutation, row-locked where the backend supports it.

        Args:
            book_id: The ID of the book

        Returns:
            The Book object if found, None otherwise
        """
        pk = coerce_id(book_id)
        if pk is None:
            return None
        stmt = (
            select(Book)
            .where(Book.id == pk)
            .with_for_update()
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        """Get a book by its ISBN.

        Args:
            isbn: The ISBN to search for

        Returns:
            The Book object if found, None otherwise
        """
        return self.session.execute(select(Book).where(Book.isbn == isbn)).scalar_one_or_none()

    def search(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        available_only: bool = False,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Book]:
        """Search the catalogue.

        Args:
            query: Free text matched against title, author and ISBN
            category: Exact category to filter by
            available_only: Only books with at least one free copy
            limit: Maximum number of results to return
            offset: Number of results to skip

        Returns:
            List of matching Book objects ordered by title
        """
        stmt = select(Book)
        if query:
            pattern = f"%{query.strip()}%"
            stmt = stmt.where(or_(
                Book.title.ilike(pattern),
                Book.author.ilike(pattern),
                Book.isbn.ilike(pattern),
            ))
        if category:
            stmt = stmt.where(Book.category == category)
        if available_only:
            stmt = stmt.where(Book.available_copies > 0)
        stmt = stmt.order_by(Book.title, Book.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars())

    def list_categories(self) -> List[str]:
        """Distinct, non-empty categories in alphabetical order"""
        stmt = (
            select(Book.category)
            .where(Book.category.is_not(None), Book.category != "")
            .distinct()
            .order_by(Book.category)
        )
        return list(self.session.execute(stmt).scalars())

    def add(self, book: Book) -> Book:
        self.session.add(book)
        self.session.flush()
        return book

    def delete(self, book: Book) -> None:
        self.session.delete(book)
        self.session.flush()
