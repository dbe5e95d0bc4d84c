# circulation/sa/repositories/loan.py
from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.orm import Session
from circulation.sa.models import Loan, LoanState
from .base import coerce_id


class LoanRepository:
    """Repository for managing Loan entities."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, loan_id: object) -> Optional[Loan]:
        pk = coerce_id(loan_id)
        if pk is None:
            return None
        return self.session.get(Loan, pk)

    def get_for_update(self, loan_id: object) -> Optional[Loan]:
        """Load a loan for a state transition, row-locked where supported"""
        pk = coerce_id(loan_id)
        if pk is None:
            return None
        stmt = (
            select(Loan)
            .where(Loan.id == pk)
            .with_for_update()
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def add(self, loan: Loan) -> Loan:
        self.session.add(loan)
        self.session.flush()
        return loan

    def count_active_for_book(self, book_id: int) -> int:
        """Number of active loans referencing a book.

        Args:
            book_id: The ID of the book

        Returns:
            Count of loans in the active state
        """
        stmt = (
            select(func.count(Loan.id))
            .where(Loan.book_id == book_id, Loan.state == LoanState.ACTIVE.value)
        )
        return self.session.execute(stmt).scalar_one()

    def has_active_loan(self, user_id: str, book_id: int) -> bool:
        stmt = (
            select(func.count(Loan.id))
            .where(
                Loan.user_id == user_id,
                Loan.book_id == book_id,
                Loan.state == LoanState.ACTIVE.value,
            )
        )
        return self.session.execute(stmt).scalar_one() > 0

    def list_loans(
        self,
        user_id: Optional[str] = None,
        book_id: Optional[int] = None,
        active_only: bool = False
    ) -> List[Loan]:
        """List loans, newest first.

        Args:
            user_id: Restrict to one borrower
            book_id: Restrict to one book
            active_only: Only loans that have not been returned

        Returns:
            List of Loan objects
        """
        stmt = select(Loan)
        if user_id is not None:
            stmt = stmt.where(Loan.user_id == user_id)
        if book_id is not None:
            stmt = stmt.where(Loan.book_id == book_id)
        if active_only:
            stmt = stmt.where(Loan.state == LoanState.ACTIVE.value)
        stmt = stmt.order_by(Loan.loan_date.desc(), Loan.id.desc())
        return list(self.session.execute(stmt).scalars())

    def list_overdue(self, now: datetime) -> List[Loan]:
        """Active loans whose due date is before ``now``, most overdue first"""
        stmt = (
            select(Loan)
            .where(Loan.state == LoanState.ACTIVE.value, Loan.due_date < now)
            .order_by(Loan.due_date, Loan.id)
        )
        return list(self.session.execute(stmt).scalars())
