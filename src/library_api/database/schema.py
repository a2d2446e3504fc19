"""
SQLAlchemy database schema for the Library API.

Two tables back the pydantic models in ``library_api.models``:

- ``book``: the catalog, with a unique isbn
- ``loan``: lending records, each pointing at one book

The unique constraint on ``book.isbn`` backs the service-level duplicate
check. There is no database constraint for "one active loan per book"; that
rule lives in ``LoanService``.
"""

from datetime import date

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Book(Base):
    """
    Book table - the library catalog.

    Loans reference books without owning them, so deleting a book that has
    loans is refused by the foreign key.
    """

    __tablename__ = "book"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    author = Column(String(200), nullable=False)
    isbn = Column(String(50), nullable=False)

    loans = relationship("Loan", back_populates="book", passive_deletes="all")

    __table_args__ = (
        UniqueConstraint("isbn", name="uq_book_isbn"),
        Index("idx_book_title", "title"),
        Index("idx_book_author", "author"),
    )

    def __repr__(self) -> str:
        return f"<Book id={self.id} isbn={self.isbn!r}>"


class Loan(Base):
    """Loan table - one row per time a book was lent out."""

    __tablename__ = "loan"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer = Column(String(200), nullable=False)
    customer_email = Column(String(255), nullable=True)
    book_id = Column(Integer, ForeignKey("book.id"), nullable=False)
    loan_date = Column(Date, nullable=False, default=date.today)
    returned = Column(Boolean, nullable=True)

    book = relationship("Book", back_populates="loans", lazy="joined")

    __table_args__ = (
        Index("idx_loan_book", "book_id"),
        Index("idx_loan_customer", "customer"),
        Index("idx_loan_date", "loan_date"),
    )

    def __repr__(self) -> str:
        return f"<Loan id={self.id} book_id={self.book_id} returned={self.returned}>"
