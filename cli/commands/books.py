import click

from ..utils import get_actor, get_system, handle_errors, print_book, success


@click.group()
def books():
    """Catalogue commands"""
    pass


@books.command()
@click.option('--isbn', required=True, help='ISBN of the book')
@click.option('--title', required=True, help='Title')
@click.option('--author', required=True, help='Author')
@click.option('--category', default=None, help='Category, e.g. Fiction')
@click.option('--published', default=None, help='Publication date (YYYY-MM-DD)')
@click.option('--description', default=None, help='Short description')
@click.option('--copies', default=1, type=int, help='Number of copies owned')
@click.pass_context
@handle_errors
def add(ctx, isbn, title, author, category, published, description, copies):
    """Add a book to the catalogue"""
    book = get_system(ctx).add_book(
        get_actor(ctx),
        isbn=isbn,
        title=title,
        author=author,
        category=category,
        publication_date=published,
        description=description,
        total_copies=copies,
    )
    success(f"Added book {book.id}: {book.title}")
    print_book(book)


@books.command(name='list')
@click.option('--search', default=None, help='Match title, author or ISBN')
@click.option('--category', default=None, help='Only this category')
@click.option('--available', is_flag=True, help='Only books with a free copy')
@click.pass_context
@handle_errors
def list_books(ctx, search, category, available):
    """List catalogued books"""
    found = get_system(ctx).list_books(search=search, category=category, available_only=available)
    if not found:
        click.echo(click.style("No books found", fg='yellow'))
        return
    for book in found:
        print_book(book)


@books.command()
@click.argument('book_id')
@click.pass_context
@handle_errors
def show(ctx, book_id):
    """Show one book"""
    book = get_system(ctx).get_book(book_id)
    print_book(book)
    if book.description:
        click.echo(book.description)


@books.command()
@click.argument('book_id')
@click.option('--title', default=None, help='New title')
@click.option('--author', default=None, help='New author')
@click.option('--category', default=None, help='New category')
@click.option('--published', default=None, help='New publication date (YYYY-MM-DD)')
@click.option('--description', default=None, help='New description')
@click.option('--copies', default=None, type=int, help='New number of copies owned')
@click.pass_context
@handle_errors
def edit(ctx, book_id, title, author, category, published, description, copies):
    """Edit a book; only the options given are changed"""
    patch = {
        'title': title,
        'author': author,
        'category': category,
        'publication_date': published,
        'description': description,
        'total_copies': copies,
    }
    patch = {field: value for field, value in patch.items() if value is not None}
    if not patch:
        click.echo(click.style("Nothing to change", fg='yellow'))
        return
    book = get_system(ctx).update_book(get_actor(ctx), book_id, patch)
    success(f"Updated book {book.id}")
    print_book(book)


@books.command()
@click.argument('book_id')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
@handle_errors
def delete(ctx, book_id, yes):
    """Delete a book without active loans"""
    if not yes:
        click.confirm(f'Delete book {book_id}?', abort=True)
    get_system(ctx).delete_book(get_actor(ctx), book_id)
    success(f"Deleted book {book_id}")


@books.command()
@click.pass_context
@handle_errors
def categories(ctx):
    """List the categories in use"""
    for category in get_system(ctx).list_categories():
        click.echo(category)


@books.command()
@click.pass_context
@handle_errors
def inventory(ctx):
    """Audit copy counters against active loans"""
    reports = get_system(ctx).inventory_report(get_actor(ctx))
    bad = 0
    for report in reports:
        ok = report.consistent and report.in_bounds
        bad += not ok
        click.echo(click.style(f"[{report.book_id}] ", fg='blue') +
                   f"total {report.total_copies}, available {report.available_copies}, "
                   f"on loan {report.active_loans} " +
                   click.style("ok" if ok else "INCONSISTENT", fg='green' if ok else 'red'))
    if bad:
        click.echo(click.style(f"\n{bad} book(s) with inconsistent counters", fg='red'))
        raise SystemExit(1)
