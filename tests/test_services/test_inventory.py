# tests/test_services/test_inventory.py
import threading
import pytest
from sqlalchemy.orm.exc import StaleDataError

from circulation.errors import (
    ConcurrencyConflict, InvalidRequest, InventoryInconsistent, NotFound, OutOfStock
)
from circulation.sa.models import Book
from circulation.services.inventory import InventoryCoordinator, InventoryReport, LockRegistry


@pytest.fixture
def inventory(database):
    return InventoryCoordinator(database, max_retries=3, locks=LockRegistry())


def _counters(database, book_id):
    with database.get_db() as session:
        book = session.get(Book, book_id)
        return book.total_copies, book.available_copies, book.withdrawn_on_loan


def test_adjust_available(inventory, database, sample_book):
    """Test taking and putting back a copy"""
    assert inventory.run(sample_book.id, lambda s: inventory.adjust_available(s, sample_book.id, -1)) == 1
    assert _counters(database, sample_book.id) == (2, 1, 0)
    assert inventory.run(sample_book.id, lambda s: inventory.adjust_available(s, sample_book.id, +1)) == 2


def test_adjust_below_zero_is_out_of_stock(inventory, database, single_copy_book):
    """Test that the counter never goes negative"""
    inventory.run(single_copy_book.id, lambda s: inventory.adjust_available(s, single_copy_book.id, -1))
    with pytest.raises(OutOfStock):
        inventory.run(single_copy_book.id, lambda s: inventory.adjust_available(s, single_copy_book.id, -1))
    assert _counters(database, single_copy_book.id) == (1, 0, 0)


def test_adjust_above_total_is_inconsistent(inventory, database, sample_book):
    """Test that the counter never exceeds the total"""
    with pytest.raises(InventoryInconsistent):
        inventory.run(sample_book.id, lambda s: inventory.adjust_available(s, sample_book.id, +1))
    assert _counters(database, sample_book.id) == (2, 2, 0)


def test_unknown_or_malformed_book(inventory):
    """Test that unknown and malformed ids are NotFound"""
    with pytest.raises(NotFound):
        inventory.run("abc", lambda s: None)
    with pytest.raises(NotFound):
        inventory.run(424242, lambda s: inventory.adjust_available(s, 424242, -1))


def test_failed_work_rolls_back(inventory, database, sample_book):
    """Test that a counter change is undone when the unit of work fails"""
    def work(session):
        inventory.adjust_available(session, sample_book.id, -1)
        raise OutOfStock(sample_book.id)

    with pytest.raises(OutOfStock):
        inventory.run(sample_book.id, work)
    assert _counters(database, sample_book.id) == (2, 2, 0)


def test_resize_grow_and_shrink(inventory, database, sample_book):
    """Test that changing the total shifts availability by the same delta"""
    inventory.run(sample_book.id, lambda s: inventory.resize_total(s, sample_book.id, 5))
    assert _counters(database, sample_book.id) == (5, 5, 0)
    inventory.run(sample_book.id, lambda s: inventory.resize_total(s, sample_book.id, 3))
    assert _counters(database, sample_book.id) == (3, 3, 0)


@pytest.mark.parametrize("bad_total", [-1, "3", 2.5, True])
def test_resize_rejects_bad_totals(inventory, sample_book, bad_total):
    with pytest.raises(InvalidRequest):
        inventory.run(sample_book.id, lambda s: inventory.resize_total(s, sample_book.id, bad_total))


def test_resize_below_loans_clamps_and_tracks_withdrawals(inventory, database, sample_book):
    """Test shrinking the total below the number of copies on loan"""
    for _ in range(2):
        inventory.run(sample_book.id, lambda s: inventory.adjust_available(s, sample_book.id, -1))

    inventory.run(sample_book.id, lambda s: inventory.resize_total(s, sample_book.id, 1))
    assert _counters(database, sample_book.id) == (1, 0, 1)

    # First returned copy goes back on the shelf, the second is the withdrawn one
    inventory.run(sample_book.id, lambda s: inventory.release_copy(s, sample_book.id))
    assert _counters(database, sample_book.id) == (1, 1, 1)
    inventory.run(sample_book.id, lambda s: inventory.release_copy(s, sample_book.id))
    assert _counters(database, sample_book.id) == (1, 1, 0)


def test_growing_total_cancels_withdrawals(inventory, database, sample_book):
    """Test that added copies first make up for withdrawn ones"""
    for _ in range(2):
        inventory.run(sample_book.id, lambda s: inventory.adjust_available(s, sample_book.id, -1))
    inventory.run(sample_book.id, lambda s: inventory.resize_total(s, sample_book.id, 1))

    inventory.run(sample_book.id, lambda s: inventory.resize_total(s, sample_book.id, 3))
    assert _counters(database, sample_book.id) == (3, 1, 0)


def test_release_copy_on_full_shelf_is_inconsistent(inventory, sample_book):
    with pytest.raises(InventoryInconsistent):
        inventory.run(sample_book.id, lambda s: inventory.release_copy(s, sample_book.id))


def test_stale_data_is_retried(inventory, sample_book):
    """Test that a version conflict is retried transparently"""
    attempts = []

    def work(session):
        attempts.append(1)
        if len(attempts) < 2:
            raise StaleDataError("simulated")
        return "done"

    assert inventory.run(sample_book.id, work) == "done"
    assert len(attempts) == 2


def test_persistent_stale_data_is_concurrency_conflict(inventory, sample_book):
    """Test that retries are bounded"""
    attempts = []

    def work(session):
        attempts.append(1)
        raise StaleDataError("simulated")

    with pytest.raises(ConcurrencyConflict) as exc_info:
        inventory.run(sample_book.id, work)
    assert len(attempts) == 3
    assert exc_info.value.attempts == 3


def test_concurrent_decrements_never_oversell(inventory, database, sample_book):
    """Test that parallel takes on two copies succeed exactly twice"""
    results = []
    barrier = threading.Barrier(6)

    def take():
        barrier.wait()
        try:
            inventory.run(sample_book.id, lambda s: inventory.adjust_available(s, sample_book.id, -1))
            results.append("ok")
        except OutOfStock:
            results.append("out")

    threads = [threading.Thread(target=take) for _ in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 2
    assert results.count("out") == 4
    assert _counters(database, sample_book.id) == (2, 0, 0)


def test_audit(inventory, sample_book, make_loan):
    """Test the inventory report against active loans"""
    make_loan(sample_book)
    report = inventory.audit(sample_book.id)
    assert report == InventoryReport(
        book_id=sample_book.id, total_copies=2, available_copies=2, active_loans=1, withdrawn_on_loan=0
    )
    assert not report.consistent
    assert report.in_bounds


def test_lock_registry_reuses_locks():
    locks = LockRegistry()
    assert locks.lock_for(1) is locks.lock_for(1)
    assert locks.lock_for(1) is not locks.lock_for(2)
