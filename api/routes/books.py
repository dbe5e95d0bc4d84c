# api/routes/books.py

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status

from circulation import Actor, LibrarySystem
from api.dependencies import get_actor, get_system
from api.schemas.book import Book, BookCreate, BookList, BookUpdate, InventoryReport

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=BookList)
def get_books(
    search: Optional[str] = Query(None, description="Search title, author or ISBN"),
    category: Optional[str] = Query(None, description="Filter by category"),
    available: bool = Query(False, description="Only books with a free copy"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    system: LibrarySystem = Depends(get_system)
):
    """
    Get a paginated list of catalogued books.

    Args:
        search: Optional search string
        category: Optional category filter
        available: Restrict to books that can be lent right now
        page: Page number (1-based)
        size: Number of items per page

    Returns:
        BookList ordered by title
    """
    books = system.list_books(search=search, category=category, available_only=available)
    offset = (page - 1) * size
    return {
        "items": books[offset:offset + size],
        "total": len(books),
        "page": page,
        "size": size
    }


@router.get("/categories", response_model=List[str])
def get_categories(system: LibrarySystem = Depends(get_system)):
    return system.list_categories()


@router.get("/inventory", response_model=List[InventoryReport])
def get_inventory(
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    """Counters of every book against its active loans (librarians only)"""
    return system.inventory_report(actor)


@router.get("/{book_id}", response_model=Book)
def get_book(book_id: str, system: LibrarySystem = Depends(get_system)):
    return system.get_book(book_id)


@router.post("", response_model=Book, status_code=status.HTTP_201_CREATED)
def create_book(
    book: BookCreate,
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    return system.add_book(actor, **book.model_dump())


@router.put("/{book_id}", response_model=Book)
def update_book(
    book_id: str,
    patch: BookUpdate,
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    """Apply the fields present in the body; a new total_copies moves availability with it"""
    return system.update_book(actor, book_id, patch.model_dump(exclude_unset=True))


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(
    book_id: str,
    actor: Actor = Depends(get_actor),
    system: LibrarySystem = Depends(get_system)
):
    system.delete_book(actor, book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
