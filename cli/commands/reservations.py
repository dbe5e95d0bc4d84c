import click

from ..utils import get_actor, get_system, handle_errors, print_loan, print_reservation, success


@click.group()
def reservations():
    """Reservation commands"""
    pass


@reservations.command()
@click.argument('book_id')
@click.option('--user', 'user_id', default=None, help='Reserve on behalf of this member')
@click.pass_context
@handle_errors
def create(ctx, book_id, user_id):
    """Reserve BOOK_ID"""
    reservation = get_system(ctx).reserve(get_actor(ctx), book_id, user_id=user_id)
    success(f"Reservation {reservation.id} created")
    print_reservation(reservation)


@reservations.command()
@click.argument('reservation_id')
@click.pass_context
@handle_errors
def cancel(ctx, reservation_id):
    """Cancel a pending reservation"""
    reservation = get_system(ctx).cancel_reservation(get_actor(ctx), reservation_id)
    success(f"Reservation {reservation.id} cancelled")


@reservations.command()
@click.argument('reservation_id')
@click.pass_context
@handle_errors
def process(ctx, reservation_id):
    """Turn a pending reservation into a loan"""
    loan = get_system(ctx).process_reservation(get_actor(ctx), reservation_id)
    success(f"Reservation {reservation_id} processed into loan {loan.id}")
    print_loan(loan)


@reservations.command(name='list')
@click.option('--user', 'user_id', default=None, help='Only reservations of this user')
@click.option('--state', default=None,
              type=click.Choice(['pending', 'processed', 'cancelled', 'expired']),
              help='Only reservations in this state')
@click.pass_context
@handle_errors
def list_reservations(ctx, user_id, state):
    """List reservations"""
    found = get_system(ctx).list_reservations(get_actor(ctx), user_id=user_id, state=state)
    if not found:
        click.echo(click.style("No reservations found", fg='yellow'))
        return
    for reservation in found:
        print_reservation(reservation)


@reservations.command()
@click.pass_context
@handle_errors
def expire(ctx):
    """Expire pending reservations past their expiration date"""
    count = get_system(ctx).expire_reservations(get_actor(ctx))
    success(f"Expired {count} reservation(s)")
