"""
Database package for the Library API.

This package provides:
- SQLAlchemy schema definitions (schema.py)
- Session management and connection handling (session.py)
- Repositories that turn queries into pydantic models
- Sample data generation (seed.py)
"""

from .book_repository import BookRepository
from .loan_repository import LoanRepository
from .repository import BaseRepository, Page, PaginationParams
from .schema import Base, Book, Loan
from .session import (
    DatabaseManager,
    DuplicateError,
    IntegrityViolationError,
    RepositoryException,
    get_db_manager,
    reset_db_manager,
    safe_commit,
    safe_query,
)

__all__ = [
    "Base",
    "BaseRepository",
    "Book",
    "BookRepository",
    "DatabaseManager",
    "DuplicateError",
    "IntegrityViolationError",
    "Loan",
    "LoanRepository",
    "Page",
    "PaginationParams",
    "RepositoryException",
    "get_db_manager",
    "reset_db_manager",
    "safe_commit",
    "safe_query",
]
