# circulation/sa/repositories/reservation.py
from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, func, update
from sqlalchemy.orm import Session
from circulation.sa.models import Reservation, ReservationState
from .base import coerce_id


class ReservationRepository:
    """Repository for managing Reservation entities.

    "Live" pending means pending and not yet past the expiration date; the
    counting queries only consider live reservations.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, reservation_id: object) -> Optional[Reservation]:
        pk = coerce_id(reservation_id)
        if pk is None:
            return None
        return self.session.get(Reservation, pk)

    def get_for_update(self, reservation_id: object) -> Optional[Reservation]:
        pk = coerce_id(reservation_id)
        if pk is None:
            return None
        stmt = (
            select(Reservation)
            .where(Reservation.id == pk)
            .with_for_update()
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def add(self, reservation: Reservation) -> Reservation:
        self.session.add(reservation)
        self.session.flush()
        return reservation

    def _live_pending(self, now: datetime):
        return select(Reservation).where(
            Reservation.state == ReservationState.PENDING.value,
            Reservation.expiration_date > now,
        )

    def has_live_pending(self, user_id: str, book_id: int, now: datetime) -> bool:
        stmt = (
            self._live_pending(now)
            .where(Reservation.user_id == user_id, Reservation.book_id == book_id)
            .with_only_columns(func.count(Reservation.id))
        )
        return self.session.execute(stmt).scalar_one() > 0

    def count_live_pending_for_user(self, user_id: str, now: datetime) -> int:
        stmt = (
            self._live_pending(now)
            .where(Reservation.user_id == user_id)
            .with_only_columns(func.count(Reservation.id))
        )
        return self.session.execute(stmt).scalar_one()

    def count_live_pending_for_book(self, book_id: int, now: datetime) -> int:
        stmt = (
            self._live_pending(now)
            .where(Reservation.book_id == book_id)
            .with_only_columns(func.count(Reservation.id))
        )
        return self.session.execute(stmt).scalar_one()

    def list_pending_for_book(self, book_id: int) -> List[Reservation]:
        """Pending reservations on a book, oldest first (queue order)"""
        stmt = (
            select(Reservation)
            .where(
                Reservation.book_id == book_id,
                Reservation.state == ReservationState.PENDING.value,
            )
            .order_by(Reservation.reservation_date, Reservation.id)
        )
        return list(self.session.execute(stmt).scalars())

    def list_reservations(
        self,
        user_id: Optional[str] = None,
        state: Optional[str] = None
    ) -> List[Reservation]:
        """List reservations, newest first.

        Args:
            user_id: Restrict to one user
            state: Restrict to one stored state

        Returns:
            List of Reservation objects
        """
        stmt = select(Reservation)
        if user_id is not None:
            stmt = stmt.where(Reservation.user_id == user_id)
        if state is not None:
            stmt = stmt.where(Reservation.state == state)
        stmt = stmt.order_by(Reservation.reservation_date.desc(), Reservation.id.desc())
        return list(self.session.execute(stmt).scalars())

    def expire_past_due(self, now: datetime, user_id: Optional[str] = None) -> int:
        """Bulk-transition pending reservations past their expiration date.

        Args:
            now: Reference time
            user_id: Only expire this user's reservations

        Returns:
            Number of reservations moved to the expired state
        """
        stmt = (
            update(Reservation)
            .where(
                Reservation.state == ReservationState.PENDING.value,
                Reservation.expiration_date <= now,
            )
        )
        if user_id is not None:
            stmt = stmt.where(Reservation.user_id == user_id)
        stmt = (
            stmt
            .values(state=ReservationState.EXPIRED.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount or 0
