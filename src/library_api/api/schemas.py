"""
Wire representations used by the HTTP layer.

Domain models are reused as-is where their JSON shape is already right
(``Book``). Loans and pages get their own camelCase envelopes.
"""

from collections.abc import Callable
from datetime import date
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..database.repository import Page
from ..models.book import Book
from ..models.loan import Loan

T = TypeVar("T")
S = TypeVar("S")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoanResponse(CamelModel):
    """A loan together with the book it lends."""

    id: int
    isbn: str
    customer: str
    email: str | None = None
    loan_date: date
    returned: bool | None = None
    book: Book

    @classmethod
    def from_loan(cls, loan: Loan) -> "LoanResponse":
        return cls(
            id=loan.id,
            isbn=loan.isbn,
            customer=loan.customer,
            email=loan.customer_email,
            loan_date=loan.loan_date,
            returned=loan.returned,
            book=loan.book,
        )


class PageableResponse(CamelModel):
    page_number: int
    page_size: int
    offset: int


class PageResponse(CamelModel, Generic[T]):
    """Paginated list envelope: the slice, its position and the total count."""

    content: list[T]
    total_elements: int
    total_pages: int
    size: int
    number: int
    number_of_elements: int
    first: bool
    last: bool
    empty: bool
    pageable: PageableResponse

    @classmethod
    def from_page(cls, page: Page[S], mapper: Callable[[S], T] | None = None) -> "PageResponse[T]":
        content = [mapper(item) for item in page.content] if mapper else list(page.content)
        return cls(
            content=content,
            total_elements=page.total,
            total_pages=page.total_pages,
            size=page.size,
            number=page.page,
            number_of_elements=len(content),
            first=not page.has_previous,
            last=not page.has_next,
            empty=not content,
            pageable=PageableResponse(
                page_number=page.page,
                page_size=page.size,
                offset=page.page * page.size,
            ),
        )


class ErrorResponse(BaseModel):
    errors: list[str]


class HealthResponse(BaseModel):
    status: str
    database: bool
    version: str
