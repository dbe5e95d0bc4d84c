# circulation/services/fines.py
from datetime import datetime
from decimal import Decimal

DEFAULT_FINE_PER_DAY = Decimal("0.50")
_CENT = Decimal("0.01")


def days_overdue(due_date: datetime, return_date: datetime) -> int:
    """Whole days between due and return date, floored; zero when on time"""
    return max(0, (return_date - due_date).days)


def calculate_fine(
    due_date: datetime,
    return_date: datetime,
    per_day: Decimal = DEFAULT_FINE_PER_DAY
) -> Decimal:
    """Fine for returning a loan: whole overdue days times the daily rate.

    Args:
        due_date: When the loan was due
        return_date: When the copy came back
        per_day: Amount charged per whole overdue day

    Returns:
        The fine as a Decimal with two places, never negative
    """
    return (Decimal(days_overdue(due_date, return_date)) * Decimal(per_day)).quantize(_CENT)


def to_cents(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1")))
