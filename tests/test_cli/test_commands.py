# tests/test_cli/test_commands.py
import pytest
from click.testing import CliRunner

from cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, system):
    """Run a CLI command against the test engine"""
    def _invoke(*args):
        return runner.invoke(cli, list(args), obj={'system': system})
    return _invoke


def test_add_and_list_books(invoke):
    result = invoke('books', 'add', '--isbn', '978-0-439-02348-1', '--title', 'The Hunger Games',
                    '--author', 'Suzanne Collins', '--category', 'Fiction', '--copies', '2')
    assert result.exit_code == 0, result.output
    assert "Added book" in result.output

    result = invoke('books', 'list', '--search', 'hunger')
    assert result.exit_code == 0
    assert "The Hunger Games" in result.output
    assert "2/2" in result.output


def test_duplicate_isbn_fails(invoke, sample_book):
    result = invoke('books', 'add', '--isbn', sample_book.isbn, '--title', 'T', '--author', 'A')
    assert result.exit_code == 1
    assert "IsbnConflict" in result.output


def test_edit_book(invoke, system, sample_book):
    result = invoke('books', 'edit', str(sample_book.id), '--copies', '4')
    assert result.exit_code == 0, result.output
    assert system.get_book(sample_book.id).available_copies == 4


def test_loan_commands(invoke, system, sample_book):
    """Test lending and returning from the command line"""
    result = invoke('loans', 'create', 'student-1', str(sample_book.id))
    assert result.exit_code == 0, result.output
    loan = system.loans.list_loans(user_id="student-1")[0]

    result = invoke('loans', 'list', '--active')
    assert f"[{loan.id}]" in result.output

    result = invoke('loans', 'return', str(loan.id))
    assert result.exit_code == 0, result.output
    assert system.get_book(sample_book.id).available_copies == 2

    result = invoke('loans', 'return', str(loan.id))
    assert result.exit_code == 1
    assert "AlreadyReturned" in result.output


def test_out_of_stock_exit_code(invoke, single_copy_book):
    invoke('loans', 'create', 'student-1', str(single_copy_book.id))
    result = invoke('loans', 'create', 'student-2', str(single_copy_book.id))
    assert result.exit_code == 1
    assert "OutOfStock" in result.output


def test_member_cannot_lend(invoke, sample_book):
    result = invoke('--as-member', 'student-1', 'loans', 'create', 'student-1', str(sample_book.id))
    assert result.exit_code == 1
    assert "Forbidden" in result.output


def test_reservation_commands(invoke, system, sample_book):
    result = invoke('--as-member', 'student-1', 'reservations', 'create', str(sample_book.id))
    assert result.exit_code == 0, result.output
    reservation = system.reservations.list_reservations(user_id="student-1")[0]

    result = invoke('reservations', 'process', str(reservation.id))
    assert result.exit_code == 0, result.output
    assert "processed into loan" in result.output

    result = invoke('reservations', 'list', '--state', 'processed')
    assert f"[{reservation.id}]" in result.output


def test_expire_command(invoke, clock, sample_book):
    invoke('reservations', 'create', str(sample_book.id), '--user', 'student-1')
    clock.advance(days=10)
    result = invoke('reservations', 'expire')
    assert result.exit_code == 0
    assert "Expired 1 reservation(s)" in result.output


def test_delete_requires_confirmation(invoke, system, sample_book):
    result = invoke('books', 'delete', str(sample_book.id))
    assert result.exit_code == 1
    assert system.get_book(sample_book.id) is not None

    result = invoke('books', 'delete', str(sample_book.id), '--yes')
    assert result.exit_code == 0, result.output


def test_inventory_command(invoke, sample_book):
    result = invoke('books', 'inventory')
    assert result.exit_code == 0
    assert "ok" in result.output


def test_db_init(runner, tmp_path):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    result = runner.invoke(cli, ['--db', url, 'db', 'init'])
    assert result.exit_code == 0, result.output
    assert (tmp_path / 'cli.db').exists()
