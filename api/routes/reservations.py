# api/routes/reservations.py

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from circulation import Actor, LibrarySystem
from api.dependencies import get_actor, get_system
from api.schemas.loan import Loan
from api.schemas.reservation import ExpireResult, Reservation, ReservationCreate

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.get("", response_model=List[Reservation])
def get_reservations(
    user_id: Optional[str] = Query(None, description="Only reservations of this user"),
    state: Optional[str] = Query(None, description="pending, processed, cancelled or expired"),
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    return system.list_reservations(actor, user_id=user_id, state=state)


@router.post("", response_model=Reservation, status_code=status.HTTP_201_CREATED)
def create_reservation(
    reservation: ReservationCreate,
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    return system.reserve(actor, reservation.book_id, user_id=reservation.user_id)


@router.put("/{reservation_id}/cancel", response_model=Reservation)
def cancel_reservation(
    reservation_id: str,
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    return system.cancel_reservation(actor, reservation_id)


@router.post("/{reservation_id}/process", response_model=Loan, status_code=status.HTTP_201_CREATED)
def process_reservation(
    reservation_id: str,
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    """
    Turn a pending reservation into a loan.

    Returns 400 OutOfStock while no copy is free; the reservation stays pending.
    """
    return system.process_reservation(actor, reservation_id)


@router.post("/expire", response_model=ExpireResult)
def expire_reservations(
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    """Sweep pending reservations past their expiration date"""
    return {"expired": system.expire_reservations(actor)}
