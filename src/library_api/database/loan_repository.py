"""
Loan repository implementation for the Library API.

Queries needed by the lending workflow:

1. **Active loan check**: is there an unreturned loan for this book?
2. **Search**: loans by book isbn OR by customer name
3. **Per-book history**: every loan of one book, paginated
4. **Late loans**: unreturned loans older than a cutoff date

A loan counts as active while ``returned`` is NULL or false.
"""

import logging
from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from ..database.schema import Book as BookDB
from ..database.schema import Loan as LoanDB
from ..models.loan import Loan as LoanModel
from ..models.loan import LoanFilter
from .repository import BaseRepository, Page, PaginationParams
from .session import safe_commit, safe_query

logger = logging.getLogger(__name__)


def _not_returned() -> ColumnElement[bool]:
    return or_(LoanDB.returned.is_(None), LoanDB.returned.is_(False))


class LoanRepository(BaseRepository[LoanDB, LoanModel]):
    """Repository for loan data access."""

    @property
    def model_class(self):
        return LoanDB

    @property
    def response_schema(self):
        return LoanModel

    def exists_active_for_book(self, book_id: int) -> bool:
        """Check whether the book currently has an unreturned loan."""
        query = (
            select(func.count())
            .select_from(LoanDB)
            .where(LoanDB.book_id == book_id, _not_returned())
        )
        count = safe_query(
            self.session, lambda s: s.execute(query).scalar(), "Failed to check active loans"
        )
        return bool(count)

    def find_by_isbn_or_customer(
        self,
        loan_filter: LoanFilter,
        pagination: PaginationParams | None = None,
    ) -> Page[LoanModel]:
        """
        Find loans whose book isbn equals ``loan_filter.isbn`` OR whose
        customer equals ``loan_filter.customer``.

        Both comparisons are exact. Unset fields contribute no predicate; with
        neither field set every loan is returned.
        """
        predicates = []
        if loan_filter.isbn:
            predicates.append(LoanDB.book.has(BookDB.isbn == loan_filter.isbn))
        if loan_filter.customer:
            predicates.append(LoanDB.customer == loan_filter.customer)

        query = select(LoanDB)
        if predicates:
            query = query.where(or_(*predicates))
        query = query.order_by(LoanDB.id.asc())

        return self._paginate(query, pagination)

    def find_by_book(
        self, book_id: int, pagination: PaginationParams | None = None
    ) -> Page[LoanModel]:
        """Every loan of one book, oldest first."""
        query = select(LoanDB).where(LoanDB.book_id == book_id).order_by(LoanDB.id.asc())
        return self._paginate(query, pagination)

    def find_late(self, cutoff: date) -> list[LoanModel]:
        """
        Unreturned loans lent strictly before ``cutoff``.

        The result is not paginated; it is meant for a periodic sweep.
        """
        query = (
            select(LoanDB)
            .where(LoanDB.loan_date < cutoff, _not_returned())
            .order_by(LoanDB.loan_date.asc(), LoanDB.id.asc())
        )
        rows = safe_query(
            self.session,
            lambda s: s.execute(query).unique().scalars().all(),
            "Failed to find late loans",
        )
        return [self._to_response_model(row) for row in rows]

    def mark_returned(self, loan_id: int) -> LoanModel | None:
        """
        Set ``returned`` on a loan.

        Returns:
            The updated loan, or None if no loan has this id
        """
        db_obj = self._get_db_obj(loan_id)
        if db_obj is None:
            return None

        if db_obj.returned is not True:
            db_obj.returned = True
            safe_commit(self.session, "return Loan")
            self.session.refresh(db_obj)
            logger.debug("Loan %s marked as returned", loan_id)

        return self._to_response_model(db_obj)
