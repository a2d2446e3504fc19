"""
Library API models.

Pydantic models for the two entities of the system:
- Book: catalog entries with a unique isbn
- Loan: a book lent to a customer, plus the payloads of the lending workflow
"""

from .book import Book, BookCreate, BookFilter, BookUpdate
from .loan import Loan, LoanCreate, LoanFilter, ReturnedLoan

__all__ = [
    "Book",
    "BookCreate",
    "BookFilter",
    "BookUpdate",
    "Loan",
    "LoanCreate",
    "LoanFilter",
    "ReturnedLoan",
]
