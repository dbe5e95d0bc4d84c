import click

from ..utils import get_actor, get_system, handle_errors, print_loan, success


@click.group()
def loans():
    """Loan commands"""
    pass


@loans.command()
@click.argument('user_id')
@click.argument('book_id')
@click.pass_context
@handle_errors
def create(ctx, user_id, book_id):
    """Lend a copy of BOOK_ID to USER_ID"""
    loan = get_system(ctx).lend(get_actor(ctx), user_id, book_id)
    success(f"Loan {loan.id} created")
    print_loan(loan)


@loans.command(name='return')
@click.argument('loan_id')
@click.pass_context
@handle_errors
def return_loan(ctx, loan_id):
    """Register the return of a loan"""
    loan = get_system(ctx).return_loan(get_actor(ctx), loan_id)
    success(f"Loan {loan.id} returned")
    if loan.fine_cents:
        click.echo(click.style(f"Fine due: {loan.fine}", fg='yellow'))
    print_loan(loan)


@loans.command()
@click.argument('loan_id')
@click.pass_context
@handle_errors
def renew(ctx, loan_id):
    """Extend a loan by one loan period"""
    loan = get_system(ctx).renew_loan(get_actor(ctx), loan_id)
    success(f"Loan {loan.id} renewed")
    print_loan(loan)


@loans.command(name='list')
@click.option('--user', 'user_id', default=None, help='Only loans of this user')
@click.option('--active', is_flag=True, help='Only loans not yet returned')
@click.pass_context
@handle_errors
def list_loans(ctx, user_id, active):
    """List loans"""
    found = get_system(ctx).list_loans(get_actor(ctx), user_id=user_id, active_only=active)
    if not found:
        click.echo(click.style("No loans found", fg='yellow'))
        return
    for loan in found:
        print_loan(loan)


@loans.command()
@click.pass_context
@handle_errors
def overdue(ctx):
    """List active loans past their due date"""
    found = get_system(ctx).list_overdue(get_actor(ctx))
    if not found:
        click.echo(click.style("No overdue loans", fg='green'))
        return
    for loan in found:
        print_loan(loan)
