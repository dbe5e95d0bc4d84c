# circulation/sa/models/reservation.py
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base, TimestampMixin, UTCDateTime


class ReservationState(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Reservation(Base, TimestampMixin):
    __tablename__ = 'reservation'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    book_id: Mapped[int | None] = mapped_column(ForeignKey('book.id', ondelete='SET NULL'), nullable=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reservation_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    expiration_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    state: Mapped[str] = mapped_column(String(20), nullable=False, default=ReservationState.PENDING.value)
    loan_id: Mapped[int | None] = mapped_column(ForeignKey('loan.id', ondelete='SET NULL'), nullable=True)

    __table_args__ = (
        Index('idx_reservation_user_state', 'user_id', 'state'),
        Index('idx_reservation_book_state', 'book_id', 'state'),
    )

    @property
    def is_pending(self) -> bool:
        return self.state == ReservationState.PENDING

    def is_past_due(self, now: datetime) -> bool:
        """True for a pending reservation whose expiration date has passed"""
        return self.is_pending and now >= self.expiration_date

    def __repr__(self) -> str:
        return f"<Reservation id={self.id} book_id={self.book_id} user_id={self.user_id!r} state={self.state}>"
