# cli/main.py
import click

from circulation.config import configure_logging
from .commands.db import db
from .commands.books import books
from .commands.loans import loans
from .commands.reservations import reservations


@click.group()
@click.option('--db', 'database_url', envvar='DATABASE_URL', default=None,
              help='Database URL (defaults to DATABASE_URL or sqlite:///circulation.db)')
@click.option('--as-member', default=None, metavar='USER_ID',
              help='Act as this member instead of as a librarian')
@click.option('--log-level', default=None, help='Override LOG_LEVEL')
@click.pass_context
def cli(ctx, database_url, as_member, log_level):
    """School library circulation CLI"""
    configure_logging(log_level)
    obj = ctx.ensure_object(dict)
    obj.setdefault('database_url', database_url)
    obj['as_member'] = as_member


cli.add_command(db)
cli.add_command(books)
cli.add_command(loans)
cli.add_command(reservations)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
