# api/schemas/book.py
from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class BookCreate(BaseModel):
    isbn: str
    title: str
    author: str
    category: Optional[str] = None
    publication_date: Optional[date] = None
    description: Optional[str] = None
    total_copies: int = Field(1, ge=0)


class BookUpdate(BaseModel):
    """Partial update; only the fields sent are applied"""
    isbn: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    publication_date: Optional[date] = None
    description: Optional[str] = None
    total_copies: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(extra="forbid")


class Book(BaseModel):
    id: int
    isbn: str
    title: str
    author: str
    category: Optional[str] = None
    publication_date: Optional[date] = None
    description: Optional[str] = None
    total_copies: int
    available_copies: int
    is_available: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookList(BaseModel):
    items: List[Book]
    total: int
    page: int
    size: int


class InventoryReport(BaseModel):
    book_id: int
    total_copies: int
    available_copies: int
    active_loans: int
    withdrawn_on_loan: int
    consistent: bool
    in_bounds: bool

    model_config = ConfigDict(from_attributes=True)
