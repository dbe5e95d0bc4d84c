# circulation/services/reservations.py
"""Reservation ledger.

A reservation is a claim on future availability: creating one never touches
the copy counters. Processing turns it into a loan through the loan ledger,
inside the same transaction as the state change, so a reservation is never
marked processed without its loan.

Expiry is lazy. A pending reservation past its expiration date is moved to
``expired`` by whichever operation reads it first, or in bulk by
``expire_past_due`` for an external scheduler.
"""
from datetime import datetime, timedelta
from typing import Callable, List, Optional
import logging

from sqlalchemy.orm import Session

from circulation.config import CirculationPolicy
from circulation.errors import (
    AlreadyBorrowed, DuplicateReservation, InvalidRequest, InvalidState, NotFound,
    ReservationLimitExceeded
)
from circulation.sa.database import Database
from circulation.sa.models import Loan, Reservation, ReservationState, utcnow
from circulation.sa.repositories import BookRepository, LoanRepository, ReservationRepository
from circulation.services.inventory import InventoryCoordinator, LockRegistry
from circulation.services.loans import LoanLedger

logger = logging.getLogger(__name__)

# Serializes the cap and duplicate checks of one user's concurrent requests
user_locks = LockRegistry()


class ReservationLedger:
    def __init__(
        self,
        database: Database,
        inventory: InventoryCoordinator,
        loans: LoanLedger,
        policy: Optional[CirculationPolicy] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.database = database
        self.inventory = inventory
        self.loans = loans
        self.policy = policy or CirculationPolicy()
        self.clock = clock

    def _expire_if_due(self, reservation: Reservation, now: datetime) -> bool:
        if reservation.is_past_due(now):
            reservation.state = ReservationState.EXPIRED.value
            logger.info("Reservation %s expired on %s", reservation.id, reservation.expiration_date)
            return True
        return False

    def create_reservation(self, user_id: str, book_id: object) -> Reservation:
        """Place a pending reservation on a book.

        Rules are checked in a fixed order and the first failure wins.

        Raises:
            NotFound: the book is unknown or the library owns no copy of it
            DuplicateReservation: the user already has a pending reservation on it
            AlreadyBorrowed: the user currently has the book on loan
            ReservationLimitExceeded: the user is at the pending-reservation cap
        """
        if not user_id:
            raise InvalidRequest("user_id is required")
        user_id = str(user_id)
        now = self.clock()

        with user_locks.hold(("user", user_id)):
            with self.database.get_db() as session:
                reservations = ReservationRepository(session)
                reservations.expire_past_due(now, user_id=user_id)

                book = BookRepository(session).get_by_id(book_id)
                if book is None or book.total_copies < 1:
                    raise NotFound("Book", book_id)
                if reservations.has_live_pending(user_id, book.id, now):
                    raise DuplicateReservation(user_id, book.id)
                if LoanRepository(session).has_active_loan(user_id, book.id):
                    raise AlreadyBorrowed(user_id, book.id)
                if reservations.count_live_pending_for_user(user_id, now) >= self.policy.max_pending_reservations:
                    logger.info("User %s hit the reservation cap", user_id)
                    raise ReservationLimitExceeded(user_id, self.policy.max_pending_reservations)

                reservation = Reservation(
                    book_id=book.id,
                    user_id=user_id,
                    reservation_date=now,
                    expiration_date=now + timedelta(days=self.policy.reservation_days),
                    state=ReservationState.PENDING.value,
                )
                reservations.add(reservation)
                logger.info("Reservation %s created: book %s for user %s", reservation.id, book.id, user_id)
                return reservation

    def cancel_reservation(self, reservation_id: object) -> Reservation:
        """Cancel a pending reservation.

        Raises:
            NotFound: unknown reservation
            InvalidState: the reservation is no longer pending (including lazily expired)
        """
        now = self.clock()
        with self.database.get_db() as session:
            reservation = ReservationRepository(session).get_for_update(reservation_id)
            if reservation is None:
                raise NotFound("Reservation", reservation_id)
            expired = self._expire_if_due(reservation, now)
            if not expired:
                if not reservation.is_pending:
                    raise InvalidState(f"Reservation {reservation.id} is {reservation.state}, not pending")
                reservation.state = ReservationState.CANCELLED.value
                logger.info("Reservation %s cancelled", reservation.id)
                return reservation
        # The expiry above has been committed; the cancellation itself is refused
        raise InvalidState(f"Reservation {reservation.id} expired before it could be cancelled")

    def process_reservation(self, reservation_id: object) -> Loan:
        """Turn a pending reservation into a loan.

        Raises:
            NotFound: unknown reservation or book
            InvalidState: the reservation is not pending (including lazily expired)
            OutOfStock: no copy is free; the reservation stays pending
        """
        reservation = self.get_reservation(reservation_id)
        if not reservation.is_pending:
            raise InvalidState(f"Reservation {reservation.id} is {reservation.state}, not pending")
        if reservation.book_id is None:
            raise NotFound("Book", None)
        now = self.clock()

        def work(session: Session) -> Optional[Loan]:
            current = ReservationRepository(session).get_for_update(reservation.id)
            if current is None:
                raise NotFound("Reservation", reservation_id)
            if self._expire_if_due(current, now):
                return None
            if not current.is_pending:
                raise InvalidState(f"Reservation {current.id} is {current.state}, not pending")
            loan = self.loans.open_loan(session, current.user_id, current.book_id, now)
            current.state = ReservationState.PROCESSED.value
            current.loan_id = loan.id
            session.flush()
            logger.info("Reservation %s processed into loan %s", current.id, loan.id)
            return loan

        loan = self.inventory.run(reservation.book_id, work)
        if loan is None:
            raise InvalidState(f"Reservation {reservation.id} expired before it could be processed")
        return loan

    def expire_past_due(self, now: Optional[datetime] = None) -> int:
        """Expire every pending reservation past its expiration date; returns how many"""
        with self.database.get_db() as session:
            count = ReservationRepository(session).expire_past_due(now or self.clock())
        if count:
            logger.info("Expired %d reservation(s)", count)
        return count

    def get_reservation(self, reservation_id: object) -> Reservation:
        now = self.clock()
        with self.database.get_db() as session:
            reservation = ReservationRepository(session).get_by_id(reservation_id)
            if reservation is None:
                raise NotFound("Reservation", reservation_id)
            self._expire_if_due(reservation, now)
            return reservation

    def list_reservations(
        self,
        user_id: Optional[str] = None,
        state: Optional[str] = None
    ) -> List[Reservation]:
        if state is not None and state not in {s.value for s in ReservationState}:
            raise InvalidRequest(f"Unknown reservation state {state!r}")
        now = self.clock()
        with self.database.get_db() as session:
            repo = ReservationRepository(session)
            repo.expire_past_due(now, user_id=user_id)
            return repo.list_reservations(user_id=user_id, state=state)
