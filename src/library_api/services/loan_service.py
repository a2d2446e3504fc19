"""
Loan service: the lending workflow and the single-active-loan rule.

A book may be lent only while none of its loans is active. Like the isbn
check in BookService this is check-then-act without locking, and unlike isbn
uniqueness there is no database constraint behind it.
"""

import logging
from datetime import date, timedelta

import logfire

from ..database.book_repository import BookRepository
from ..database.loan_repository import LoanRepository
from ..database.repository import Page
from ..exceptions import (
    BookAlreadyLoanedError,
    BookNotFoundError,
    InvalidArgumentError,
    LoanNotFoundError,
    LoanReopenError,
)
from ..models.loan import Loan, LoanFilter
from .book_service import build_pagination

logger = logging.getLogger(__name__)

DEFAULT_LATE_LOAN_DAYS = 4


class LoanService:
    """Lend books, take them back and query loan history."""

    def __init__(
        self,
        repository: LoanRepository,
        book_repository: BookRepository,
        max_page_size: int = 100,
        late_loan_days: int = DEFAULT_LATE_LOAN_DAYS,
    ):
        self.repository = repository
        self.book_repository = book_repository
        self.max_page_size = max_page_size
        self.late_loan_days = late_loan_days

    def create(self, book_isbn: str, customer: str, customer_email: str | None = None) -> Loan:
        """
        Lend the book identified by ``book_isbn`` to ``customer``, dated today.

        Raises:
            BookNotFoundError: no book has this isbn
            BookAlreadyLoanedError: the book has an unreturned loan
        """
        with logfire.span("loan.create", isbn=book_isbn, customer=customer):
            book = self.book_repository.get_by_isbn(book_isbn)
            if book is None:
                raise BookNotFoundError("Book not found for passed isbn")

            if self.repository.exists_active_for_book(book.id):
                logger.info("Book %s is already loaned", book.isbn)
                raise BookAlreadyLoanedError()

            loan = self.repository.create(
                {
                    "book_id": book.id,
                    "customer": customer,
                    "customer_email": customer_email,
                    "loan_date": date.today(),
                    "returned": False,
                }
            )
            logger.info("Lent book %s to %s (loan %s)", book.isbn, customer, loan.id)
            return loan

    def get_by_id(self, loan_id: int) -> Loan | None:
        return self.repository.get_by_id(loan_id)

    def mark_returned(self, loan_id: int) -> Loan:
        """
        Record that the book of a loan came back. Returning twice is harmless.

        Raises:
            LoanNotFoundError: no loan has this id
        """
        with logfire.span("loan.return", loan_id=loan_id):
            loan = self.repository.mark_returned(loan_id)
            if loan is None:
                raise LoanNotFoundError()

            logger.info("Loan %s returned", loan_id)
            return loan

    def set_returned(self, loan_id: int, returned: bool) -> Loan:
        """
        Apply the ``returned`` flag sent by a client.

        ``True`` marks the loan returned. ``False`` leaves an active loan as it
        is and is refused for a returned one, since loans never reopen.

        Raises:
            LoanNotFoundError: no loan has this id
            LoanReopenError: ``returned`` is False and the loan was returned
        """
        if returned:
            return self.mark_returned(loan_id)

        loan = self.repository.get_by_id(loan_id)
        if loan is None:
            raise LoanNotFoundError()
        if not loan.is_active:
            raise LoanReopenError()
        return loan

    def find(
        self,
        isbn: str | None = None,
        customer: str | None = None,
        page: int = 0,
        size: int = 20,
    ) -> Page[Loan]:
        """
        Loans whose book isbn equals ``isbn`` OR whose customer equals ``customer``.

        Raises:
            InvalidArgumentError: ``page`` is negative or ``size`` out of range
        """
        pagination = build_pagination(page, size, self.max_page_size)
        return self.repository.find_by_isbn_or_customer(
            LoanFilter(isbn=isbn, customer=customer), pagination
        )

    def list_by_book(self, book_id: int, page: int = 0, size: int = 20) -> Page[Loan]:
        """Every loan of one book, paginated."""
        pagination = build_pagination(page, size, self.max_page_size)
        return self.repository.find_by_book(book_id, pagination)

    def list_late(self, threshold_days: int | None = None, today: date | None = None) -> list[Loan]:
        """
        Unreturned loans dated strictly before ``today - threshold_days``.

        Raises:
            InvalidArgumentError: ``threshold_days`` is negative
        """
        days = self.late_loan_days if threshold_days is None else threshold_days
        if days < 0:
            raise InvalidArgumentError("Late loan threshold must not be negative")

        cutoff = (today or date.today()) - timedelta(days=days)
        loans = self.repository.find_late(cutoff)
        logger.debug("Found %d loans lent before %s", len(loans), cutoff)
        return loans
