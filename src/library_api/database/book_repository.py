"""
Book repository implementation for the Library API.

Besides the inherited CRUD operations this repository answers the questions
``BookService`` asks:

1. **Uniqueness**: does a book with this isbn already exist?
2. **Lookup by isbn**: used when lending a book
3. **Search**: case-insensitive partial match on any combination of fields
"""

from sqlalchemy import and_, func, select

from ..database.schema import Book as BookDB
from ..database.schema import Loan as LoanDB
from ..models.book import Book as BookModel
from ..models.book import BookFilter
from .repository import BaseRepository, Page, PaginationParams
from .session import safe_query


class BookRepository(BaseRepository[BookDB, BookModel]):
    """Repository for book data access."""

    @property
    def model_class(self):
        return BookDB

    @property
    def response_schema(self):
        return BookModel

    def get_by_isbn(self, isbn: str) -> BookModel | None:
        """
        Get book by isbn (exact, case-sensitive match).

        Returns:
            Book model or None if not found
        """
        query = select(BookDB).where(BookDB.isbn == isbn)
        result = safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            "Failed to get book by isbn",
        )

        if result is None:
            return None

        return self._to_response_model(result)

    def exists_by_isbn(self, isbn: str) -> bool:
        query = select(func.count()).select_from(BookDB).where(BookDB.isbn == isbn)
        count = safe_query(
            self.session, lambda s: s.execute(query).scalar(), "Failed to check isbn"
        )
        return bool(count)

    def has_loans(self, book_id: int) -> bool:
        """Check whether any loan, returned or not, references the book."""
        query = select(func.count()).select_from(LoanDB).where(LoanDB.book_id == book_id)
        count = safe_query(
            self.session, lambda s: s.execute(query).scalar(), "Failed to count book loans"
        )
        return bool(count)

    def search(
        self,
        book_filter: BookFilter,
        pagination: PaginationParams | None = None,
    ) -> Page[BookModel]:
        """
        Search for books matching every non-empty field of ``book_filter``.

        Each present field becomes a case-insensitive containment predicate on
        the matching column, with ``%`` and ``_`` taken literally. Absent fields
        add nothing, so an empty filter lists the whole catalog. Results are
        ordered by id.
        """
        columns = {
            "title": BookDB.title,
            "author": BookDB.author,
            "isbn": BookDB.isbn,
        }

        filters = [
            columns[field].icontains(value, autoescape=True)
            for field, value in book_filter.active_fields().items()
        ]

        query = select(BookDB)
        if filters:
            query = query.where(and_(*filters))
        query = query.order_by(BookDB.id.asc())

        return self._paginate(query, pagination)
