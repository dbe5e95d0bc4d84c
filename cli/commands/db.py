import click

from ..utils import get_system, success


@click.group()
def db():
    """Database management commands"""
    pass


@db.command()
@click.pass_context
def init(ctx):
    """Create the circulation tables"""
    system = get_system(ctx)
    system.database.init_db()
    success(f"Database initialized at {system.database.connection_string}")


@db.command()
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def drop(ctx, yes):
    """Drop every circulation table"""
    if not yes:
        click.confirm('This deletes all books, loans and reservations. Continue?', abort=True)
    get_system(ctx).database.drop_db()
    success("Database dropped")
