# circulation/services/loans.py
from datetime import datetime, timedelta
from typing import Callable, List, Optional
import logging

from sqlalchemy.orm import Session

from circulation.config import CirculationPolicy
from circulation.errors import AlreadyReturned, InvalidRequest, NotFound
from circulation.sa.database import Database
from circulation.sa.models import Loan, LoanState, utcnow
from circulation.sa.repositories import BookRepository, LoanRepository, ReservationRepository
from circulation.services.events import CopyAvailable, EventBus
from circulation.services.fines import calculate_fine, to_cents
from circulation.services.inventory import InventoryCoordinator

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class LoanLedger:
    """Creates, returns and renews loans.

    Counter changes go through the inventory coordinator; this class only
    writes Loan rows.
    """

    def __init__(
        self,
        database: Database,
        inventory: InventoryCoordinator,
        policy: Optional[CirculationPolicy] = None,
        events: Optional[EventBus] = None,
        clock: Clock = utcnow
    ):
        self.database = database
        self.inventory = inventory
        self.policy = policy or CirculationPolicy()
        self.events = events or EventBus()
        self.clock = clock

    @property
    def loan_period(self) -> timedelta:
        return timedelta(days=self.policy.loan_period_days)

    # ---- create

    def open_loan(self, session: Session, user_id: str, book_id: object, now: datetime) -> Loan:
        """Take one copy and record the loan inside an ongoing ``inventory.run`` transaction"""
        if not user_id:
            raise InvalidRequest("user_id is required")
        self.inventory.adjust_available(session, book_id, -1)
        book = BookRepository(session).get_by_id(book_id)
        loan = Loan(
            book_id=book.id,
            user_id=str(user_id),
            loan_date=now,
            due_date=now + self.loan_period,
            state=LoanState.ACTIVE.value,
        )
        LoanRepository(session).add(loan)
        logger.info("Loan %s opened: book %s to user %s, due %s", loan.id, book.id, user_id, loan.due_date)
        return loan

    def create_loan(self, user_id: str, book_id: object) -> Loan:
        """Lend a copy of a book.

        Raises:
            NotFound: unknown book
            OutOfStock: no copy is free
        """
        now = self.clock()
        return self.inventory.run(book_id, lambda session: self.open_loan(session, user_id, book_id, now))

    # ---- return

    def return_loan(self, loan_id: object) -> Loan:
        """Close an active loan, assess the fine and put the copy back.

        Raises:
            NotFound: unknown loan
            AlreadyReturned: the loan is already closed
            InventoryInconsistent: the copy would push availability past the total
        """
        loan = self.get_loan(loan_id)
        if not loan.is_active:
            raise AlreadyReturned(loan.id)
        if loan.book_id is None:
            raise NotFound("Book", None)

        now = self.clock()

        def work(session: Session) -> tuple[Loan, int, int]:
            current = LoanRepository(session).get_for_update(loan.id)
            if current is None:
                raise NotFound("Loan", loan_id)
            if not current.is_active:
                raise AlreadyReturned(current.id)

            current.return_date = now
            current.fine_cents = to_cents(
                calculate_fine(current.due_date, now, self.policy.fine_per_day)
            )
            current.state = LoanState.RETURNED.value

            available = self.inventory.release_copy(session, current.book_id)
            session.flush()
            pending = ReservationRepository(session).count_live_pending_for_book(current.book_id, now)
            return current, available, pending

        returned, available, pending = self.inventory.run(loan.book_id, work)
        logger.info("Loan %s returned, fine %s", returned.id, returned.fine)
        if pending and available > 0:
            self.events.publish(CopyAvailable(
                book_id=returned.book_id,
                available_copies=available,
                pending_reservations=pending,
                occurred_at=now,
            ))
        return returned

    # ---- renew

    def renew_loan(self, loan_id: object) -> Loan:
        """Push the due date one loan period past the current due date.

        Raises:
            NotFound: unknown loan
            AlreadyReturned: the loan is already closed
        """
        with self.database.get_db() as session:
            loan = LoanRepository(session).get_for_update(loan_id)
            if loan is None:
                raise NotFound("Loan", loan_id)
            if not loan.is_active:
                raise AlreadyReturned(loan.id)
            loan.due_date = loan.due_date + self.loan_period
            loan.renewals += 1
            session.flush()
            logger.info("Loan %s renewed, now due %s", loan.id, loan.due_date)
            return loan

    # ---- queries

    def get_loan(self, loan_id: object) -> Loan:
        with self.database.get_db() as session:
            loan = LoanRepository(session).get_by_id(loan_id)
            if loan is None:
                raise NotFound("Loan", loan_id)
            return loan

    def list_loans(self, user_id: Optional[str] = None, active_only: bool = False) -> List[Loan]:
        with self.database.get_db() as session:
            return LoanRepository(session).list_loans(user_id=user_id, active_only=active_only)

    def list_overdue(self, now: Optional[datetime] = None) -> List[Loan]:
        with self.database.get_db() as session:
            return LoanRepository(session).list_overdue(now or self.clock())
