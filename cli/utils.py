import functools
from typing import Any, Callable, Optional

import click

from circulation import Actor, LibrarySystem, Role
from circulation.errors import CirculationError
from circulation.sa.database import Database
from circulation.sa.models import Book, Loan, Reservation

# Identity the CLI acts under unless --as-member is given
CLI_LIBRARIAN = "cli"


def get_system(ctx: click.Context) -> LibrarySystem:
    """Engine stored on the context, built on first use from --db"""
    obj = ctx.ensure_object(dict)
    if 'system' not in obj:
        obj['system'] = LibrarySystem(database=Database(obj.get('database_url')))
    return obj['system']


def get_actor(ctx: click.Context) -> Actor:
    obj = ctx.ensure_object(dict)
    member = obj.get('as_member')
    if member:
        return Actor(user_id=member, role=Role.MEMBER)
    return Actor(user_id=CLI_LIBRARIAN, role=Role.LIBRARIAN)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Print engine rejections in red and exit with status 1"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CirculationError as e:
            click.echo(click.style(f"{e.kind}: ", fg='red', bold=True) + click.style(e.message, fg='red'), err=True)
            raise SystemExit(1)
    return wrapper


def success(message: str) -> None:
    click.echo(click.style(message, fg='green'))


def _fmt_date(value: Optional[Any]) -> str:
    return value.strftime('%Y-%m-%d') if value else '-'


def print_book(book: Book) -> None:
    copies = click.style(f"{book.available_copies}/{book.total_copies}",
                         fg='green' if book.is_available else 'yellow')
    click.echo(click.style(f"[{book.id}] ", fg='blue') + click.style(book.title, fg='cyan') +
               f" by {book.author} (ISBN {book.isbn}) copies: " + copies +
               (f" [{book.category}]" if book.category else ''))


def print_loan(loan: Loan) -> None:
    state = click.style(loan.state, fg='green' if loan.is_active else 'blue')
    line = (click.style(f"[{loan.id}] ", fg='blue') +
            f"book {loan.book_id} -> {loan.user_id}, due {_fmt_date(loan.due_date)} " + state)
    if loan.return_date:
        line += f", returned {_fmt_date(loan.return_date)}, fine {loan.fine}"
    click.echo(line)


def print_reservation(reservation: Reservation) -> None:
    colors = {'pending': 'yellow', 'processed': 'green', 'cancelled': 'blue', 'expired': 'red'}
    click.echo(click.style(f"[{reservation.id}] ", fg='blue') +
               f"book {reservation.book_id} for {reservation.user_id}, "
               f"expires {_fmt_date(reservation.expiration_date)} " +
               click.style(reservation.state, fg=colors.get(reservation.state, 'white')))
