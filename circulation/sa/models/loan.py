# circulation/sa/models/loan.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base, TimestampMixin, UTCDateTime


class LoanState(str, Enum):
    ACTIVE = "active"
    RETURNED = "returned"


class Loan(Base, TimestampMixin):
    __tablename__ = 'loan'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    book_id: Mapped[int | None] = mapped_column(ForeignKey('book.id', ondelete='SET NULL'), nullable=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    loan_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    due_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    return_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    fine_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    renewals: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    state: Mapped[str] = mapped_column(String(20), nullable=False, default=LoanState.ACTIVE.value)

    __table_args__ = (
        Index('idx_loan_book_state', 'book_id', 'state'),
        Index('idx_loan_user_state', 'user_id', 'state'),
    )

    @property
    def is_active(self) -> bool:
        return self.state == LoanState.ACTIVE

    @property
    def fine(self) -> Decimal:
        """Fine in currency units (stored as integer cents)"""
        return (Decimal(self.fine_cents) / 100).quantize(Decimal("0.01"))

    def is_overdue(self, now: datetime) -> bool:
        return self.is_active and now > self.due_date

    def __repr__(self) -> str:
        return f"<Loan id={self.id} book_id={self.book_id} user_id={self.user_id!r} state={self.state}>"
