"""
Book service: catalog operations and the isbn uniqueness rule.

The uniqueness check is check-then-act (look for the isbn, then insert). Two
concurrent creates can both pass the check; the unique constraint on
``book.isbn`` then rejects the loser, which is reported as the same
DuplicateIsbnError.
"""

import logging

import logfire

from ..database.book_repository import BookRepository
from ..database.repository import Page, PaginationParams
from ..database.session import DuplicateError, IntegrityViolationError
from ..exceptions import (
    BookInUseError,
    BookNotFoundError,
    DuplicateIsbnError,
    InvalidArgumentError,
)
from ..models.book import Book, BookFilter

logger = logging.getLogger(__name__)


def build_pagination(page: int, size: int, max_size: int) -> PaginationParams:
    """Build pagination parameters, rejecting out-of-range values."""
    pagination = PaginationParams(page=page, size=size)
    try:
        pagination.validate_params(max_size=max_size)
    except ValueError as e:
        raise InvalidArgumentError(str(e)) from e
    return pagination


class BookService:
    """Create, read, update, delete and search books."""

    def __init__(self, repository: BookRepository, max_page_size: int = 100):
        self.repository = repository
        self.max_page_size = max_page_size

    def create(self, title: str, author: str, isbn: str) -> Book:
        """
        Register a new book.

        Raises:
            DuplicateIsbnError: another book already uses ``isbn``
        """
        with logfire.span("book.create", isbn=isbn):
            if self.repository.exists_by_isbn(isbn):
                logger.info("Rejected book with duplicate isbn %s", isbn)
                raise DuplicateIsbnError()

            try:
                book = self.repository.create({"title": title, "author": author, "isbn": isbn})
            except DuplicateError as e:
                raise DuplicateIsbnError() from e

            logger.info("Created book %s (isbn %s)", book.id, book.isbn)
            return book

    def get_by_id(self, book_id: int) -> Book | None:
        return self.repository.get_by_id(book_id)

    def get_by_isbn(self, isbn: str) -> Book | None:
        return self.repository.get_by_isbn(isbn)

    def update(self, book_id: int | None, title: str, author: str) -> Book:
        """
        Overwrite the title and author of a book. The isbn is never changed.

        Raises:
            InvalidArgumentError: ``book_id`` is None
            BookNotFoundError: no book has this id
        """
        if book_id is None:
            raise InvalidArgumentError("Book id cannot be null")

        with logfire.span("book.update", book_id=book_id):
            book = self.repository.update(book_id, {"title": title, "author": author})
            if book is None:
                raise BookNotFoundError()

            logger.info("Updated book %s", book_id)
            return book

    def delete_by_id(self, book_id: int | None) -> None:
        """
        Delete a book.

        Raises:
            InvalidArgumentError: ``book_id`` is None
            BookNotFoundError: no book has this id
            BookInUseError: loans still reference the book
        """
        if book_id is None:
            raise InvalidArgumentError("Book id cannot be null")

        with logfire.span("book.delete", book_id=book_id):
            if not self.repository.exists(book_id):
                raise BookNotFoundError()

            if self.repository.has_loans(book_id):
                raise BookInUseError()

            try:
                self.repository.delete(book_id)
            except IntegrityViolationError as e:
                raise BookInUseError() from e

            logger.info("Deleted book %s", book_id)

    def find(self, book_filter: BookFilter, page: int = 0, size: int = 20) -> Page[Book]:
        """
        Search books by case-insensitive partial match on title, author and isbn.

        Raises:
            InvalidArgumentError: ``page`` is negative or ``size`` out of range
        """
        pagination = build_pagination(page, size, self.max_page_size)
        return self.repository.search(book_filter, pagination)
