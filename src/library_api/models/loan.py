"""
Loan models for the Library API.

A loan records that a customer borrowed a book on a given date. The
``returned`` flag is tri-state (``None`` for legacy rows, ``False`` while the
book is out, ``True`` once it is back) and only ever moves towards ``True``.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .book import Book


class Loan(BaseModel):
    """A book lent to a customer."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Identifier assigned by the database")
    book: Book = Field(..., description="The borrowed book")
    customer: str = Field(..., description="Name of the borrowing customer")
    customer_email: str | None = Field(None, description="Contact address of the customer")
    loan_date: date = Field(default_factory=date.today, description="Day the book was lent")
    returned: bool | None = Field(None, description="Whether the book came back")

    @property
    def isbn(self) -> str:
        return self.book.isbn

    @property
    def is_active(self) -> bool:
        """An active loan is one whose book has not been returned yet."""
        return self.returned is not True

    def days_out(self, today: date | None = None) -> int:
        """Number of days since the book was lent."""
        return ((today or date.today()) - self.loan_date).days


class LoanCreate(BaseModel):
    """Payload for lending a book, identified by its isbn, to a customer."""

    isbn: str = Field(..., min_length=1, max_length=50, examples=["001"])
    customer: str = Field(..., min_length=1, max_length=200, examples=["Alan"])
    email: EmailStr | None = Field(None, examples=["customer@email.com"])


class ReturnedLoan(BaseModel):
    """Payload of the return workflow."""

    returned: bool = Field(..., examples=[True])


class LoanFilter(BaseModel):
    """
    Loan search filter.

    A loan matches when its book isbn equals ``isbn`` OR its customer equals
    ``customer``. Unset fields add no condition.
    """

    isbn: str | None = None
    customer: str | None = None
