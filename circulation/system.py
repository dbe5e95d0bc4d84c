# circulation/system.py
from typing import Any, Dict, List, Optional

from circulation.access import Actor, require_librarian, require_self_or_librarian
from circulation.config import CirculationPolicy, Settings, settings as default_settings
from circulation.sa.database import Database
from circulation.sa.models import Book, Loan, Reservation, utcnow
from circulation.services.catalog import CatalogService
from circulation.services.events import EventBus, Handler
from circulation.services.inventory import InventoryCoordinator, InventoryReport, LockRegistry
from circulation.services.loans import Clock, LoanLedger
from circulation.services.reservations import ReservationLedger


class LibrarySystem:
    """
    Facade that wires the database and services together and checks the
    caller's capabilities before every mutation.
    """

    def __init__(
        self,
        database: Optional[Database] = None,
        settings: Optional[Settings] = None,
        policy: Optional[CirculationPolicy] = None,
        clock: Clock = utcnow,
        locks: Optional[LockRegistry] = None
    ) -> None:
        settings = settings or default_settings
        self.database = database or Database(settings.database_url)
        self.policy = policy or settings.policy

        # services
        self.events = EventBus()
        self.inventory = InventoryCoordinator(
            self.database, max_retries=settings.inventory_max_retries, locks=locks
        )
        self.catalog = CatalogService(self.database, self.inventory)
        self.loans = LoanLedger(self.database, self.inventory, self.policy, self.events, clock)
        self.reservations = ReservationLedger(
            self.database, self.inventory, self.loans, self.policy, clock
        )

    def subscribe(self, handler: Handler) -> None:
        """Register a callback for CopyAvailable events"""
        self.events.subscribe(handler)

    # ---- catalogue

    def add_book(self, actor: Actor, **fields: Any) -> Book:
        require_librarian(actor, "add books")
        return self.catalog.create_book(**fields)

    def update_book(self, actor: Actor, book_id: object, patch: Dict[str, Any]) -> Book:
        require_librarian(actor, "edit books")
        return self.catalog.update_book(book_id, patch)

    def delete_book(self, actor: Actor, book_id: object) -> None:
        require_librarian(actor, "delete books")
        self.catalog.delete_book(book_id)

    def get_book(self, book_id: object) -> Book:
        return self.catalog.get_book(book_id)

    def list_books(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        available_only: bool = False
    ) -> List[Book]:
        return self.catalog.list_books(search, category, available_only)

    def list_categories(self) -> List[str]:
        return self.catalog.list_categories()

    # ---- loans

    def lend(self, actor: Actor, user_id: str, book_id: object) -> Loan:
        require_librarian(actor, "create loans")
        return self.loans.create_loan(user_id, book_id)

    def return_loan(self, actor: Actor, loan_id: object) -> Loan:
        require_librarian(actor, "register returns")
        return self.loans.return_loan(loan_id)

    def renew_loan(self, actor: Actor, loan_id: object) -> Loan:
        if not actor.is_librarian:
            loan = self.loans.get_loan(loan_id)
            require_self_or_librarian(actor, loan.user_id, "renew loans")
        return self.loans.renew_loan(loan_id)

    def list_loans(
        self,
        actor: Actor,
        user_id: Optional[str] = None,
        active_only: bool = False
    ) -> List[Loan]:
        require_self_or_librarian(actor, user_id, "list loans")
        if not actor.is_librarian:
            user_id = actor.user_id
        return self.loans.list_loans(user_id=user_id, active_only=active_only)

    def list_overdue(self, actor: Actor) -> List[Loan]:
        require_librarian(actor, "list overdue loans")
        return self.loans.list_overdue()

    # ---- reservations

    def reserve(self, actor: Actor, book_id: object, user_id: Optional[str] = None) -> Reservation:
        require_self_or_librarian(actor, user_id, "create reservations")
        return self.reservations.create_reservation(user_id or actor.user_id, book_id)

    def cancel_reservation(self, actor: Actor, reservation_id: object) -> Reservation:
        if not actor.is_librarian:
            reservation = self.reservations.get_reservation(reservation_id)
            require_self_or_librarian(actor, reservation.user_id, "cancel reservations")
        return self.reservations.cancel_reservation(reservation_id)

    def process_reservation(self, actor: Actor, reservation_id: object) -> Loan:
        require_librarian(actor, "process reservations")
        return self.reservations.process_reservation(reservation_id)

    def expire_reservations(self, actor: Actor) -> int:
        require_librarian(actor, "expire reservations")
        return self.reservations.expire_past_due()

    def list_reservations(
        self,
        actor: Actor,
        user_id: Optional[str] = None,
        state: Optional[str] = None
    ) -> List[Reservation]:
        require_self_or_librarian(actor, user_id, "list reservations")
        if not actor.is_librarian:
            user_id = actor.user_id
        return self.reservations.list_reservations(user_id=user_id, state=state)

    # ---- reporting

    def inventory_report(self, actor: Actor) -> List[InventoryReport]:
        """Counters of every book next to its active-loan count"""
        require_librarian(actor, "audit the inventory")
        return [self.inventory.audit(book.id) for book in self.catalog.list_books()]
