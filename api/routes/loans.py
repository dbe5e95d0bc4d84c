# api/routes/loans.py

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from circulation import Actor, LibrarySystem
from api.dependencies import get_actor, get_system
from api.schemas.loan import Loan, LoanCreate

router = APIRouter(prefix="/loans", tags=["loans"])


@router.get("", response_model=List[Loan])
def get_loans(
    user_id: Optional[str] = Query(None, description="Only loans of this user"),
    active: bool = Query(False, description="Only loans not yet returned"),
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    """
    List loans, newest first.

    Members only ever see their own loans; asking for another user's is refused.
    """
    return system.list_loans(actor, user_id=user_id, active_only=active)


@router.get("/overdue", response_model=List[Loan])
def get_overdue_loans(
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    return system.list_overdue(actor)


@router.post("", response_model=Loan, status_code=status.HTTP_201_CREATED)
def create_loan(
    loan: LoanCreate,
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    return system.lend(actor, loan.user_id, loan.book_id)


@router.put("/{loan_id}/return", response_model=Loan)
def return_loan(
    loan_id: str,
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    """Close the loan and report the assessed fine"""
    return system.return_loan(actor, loan_id)


@router.put("/{loan_id}/renew", response_model=Loan)
def renew_loan(
    loan_id: str,
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    return system.renew_loan(actor, loan_id)
