# circulation/sa/models/book.py
from datetime import date
from sqlalchemy import String, Integer, Text, Date, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base, TimestampMixin


class Book(Base, TimestampMixin):
    __tablename__ = 'book'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    isbn: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    publication_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_copies: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    available_copies: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Copies taken off total_copies while they were out on loan
    withdrawn_on_loan: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Optimistic lock: every UPDATE is guarded by "WHERE version = <loaded>"
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint('total_copies >= 0', name='ck_book_total_copies_non_negative'),
        CheckConstraint('available_copies >= 0', name='ck_book_available_copies_non_negative'),
        CheckConstraint('available_copies <= total_copies', name='ck_book_available_within_total'),
        Index('idx_book_title', 'title'),
        Index('idx_book_category', 'category'),
    )

    @property
    def is_available(self) -> bool:
        return self.available_copies > 0

    def __repr__(self) -> str:
        return (
            f"<Book id={self.id} isbn={self.isbn!r} "
            f"available={self.available_copies}/{self.total_copies}>"
        )
