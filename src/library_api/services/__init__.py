"""Domain services enforcing the library's business rules."""

from .book_service import BookService
from .loan_service import LoanService

__all__ = ["BookService", "LoanService"]
