"""
Sample data generation for the Library API.

Generates a catalog of books with unique isbns and a loan history in which
each book has at most one unreturned loan, some of them old enough to be
late. Useful for local development and demos.
"""

import logging
import random
from dataclasses import dataclass
from datetime import date, timedelta

from faker import Faker
from sqlalchemy.orm import Session

from .schema import Book, Loan

logger = logging.getLogger(__name__)


@dataclass
class SeedResult:
    books: int
    loans: int
    active_loans: int


def seed_database(
    session: Session,
    books: int = 50,
    loans: int = 100,
    seed: int | None = 42,
    today: date | None = None,
) -> SeedResult:
    """
    Insert ``books`` books and up to ``loans`` loans.

    Loans are generated per book in chronological order; only the newest loan
    of a book may be left unreturned, so the single-active-loan rule holds.
    Isbns already present in the database are skipped.
    """
    fake = Faker()
    rng = random.Random(seed)
    if seed is not None:
        fake.seed_instance(seed)
    today = today or date.today()

    existing = {isbn for (isbn,) in session.query(Book.isbn).all()}
    new_books: list[Book] = []
    while len(new_books) < books:
        isbn = fake.isbn13(separator="")
        if isbn in existing:
            continue
        existing.add(isbn)
        new_books.append(
            Book(
                title=fake.catch_phrase().title(),
                author=fake.name(),
                isbn=isbn,
            )
        )

    session.add_all(new_books)
    session.flush()

    created_loans = 0
    active_loans = 0
    if new_books:
        per_book: dict[int, int] = {}
        for _ in range(loans):
            book = rng.choice(new_books)
            per_book[book.id] = per_book.get(book.id, 0) + 1

        for book_id, count in per_book.items():
            loan_date = today - timedelta(days=rng.randint(count * 7, count * 7 + 60))
            for index in range(count):
                is_last = index == count - 1
                returned = not (is_last and rng.random() < 0.4)
                customer = fake.name()
                session.add(
                    Loan(
                        book_id=book_id,
                        customer=customer,
                        customer_email=fake.email(),
                        loan_date=loan_date,
                        returned=returned,
                    )
                )
                created_loans += 1
                active_loans += 0 if returned else 1
                loan_date = min(today, loan_date + timedelta(days=rng.randint(3, 7)))

    session.flush()
    logger.info(
        "Seeded %d books and %d loans (%d active)", len(new_books), created_loans, active_loans
    )
    return SeedResult(books=len(new_books), loans=created_loans, active_loans=active_loans)
