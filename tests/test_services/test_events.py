# tests/test_services/test_events.py
from datetime import datetime, UTC

from circulation.services.events import CopyAvailable, EventBus


def _event():
    return CopyAvailable(book_id=1, available_copies=1, pending_reservations=2,
                         occurred_at=datetime(2024, 1, 1, tzinfo=UTC))


def test_publish_and_unsubscribe():
    bus = EventBus()
    seen = []
    bus.subscribe(seen.append)
    bus.publish(_event())
    bus.unsubscribe(seen.append)
    bus.publish(_event())
    assert len(seen) == 1


def test_failing_handler_does_not_stop_others(caplog):
    """Test that one broken subscriber is logged and skipped"""
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("mail server down")

    bus.subscribe(broken)
    bus.subscribe(seen.append)
    bus.publish(_event())

    assert len(seen) == 1
    assert "failed" in caplog.text


def test_return_notifies_waiting_reservations(system, sample_book):
    """Test that a return on a reserved book announces the free copy"""
    seen = []
    system.subscribe(seen.append)
    first = system.loans.create_loan("student-1", sample_book.id)
    system.loans.create_loan("student-2", sample_book.id)
    system.reservations.create_reservation("student-3", sample_book.id)

    system.loans.return_loan(first.id)

    assert len(seen) == 1
    assert seen[0].book_id == sample_book.id
    assert seen[0].available_copies == 1
    assert seen[0].pending_reservations == 1


def test_return_without_reservations_is_quiet(system, sample_book):
    seen = []
    system.subscribe(seen.append)
    loan = system.loans.create_loan("student-1", sample_book.id)
    system.loans.return_loan(loan.id)
    assert seen == []
