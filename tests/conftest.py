"""Test configuration and fixtures for the Library API.

- Isolated databases: every test gets a fresh in-memory SQLite database
- Configuration overrides: test-specific settings, global config reset after
- Factories for books and loans written straight to the schema
- A FastAPI TestClient wired to the test database
"""

from collections.abc import Callable, Generator
from datetime import date
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from library_api.api import create_app
from library_api.config import ServerConfig, reset_config
from library_api.database.book_repository import BookRepository
from library_api.database.loan_repository import LoanRepository
from library_api.database.schema import Book as BookDB
from library_api.database.schema import Loan as LoanDB
from library_api.database.session import DatabaseManager
from library_api.services.book_service import BookService
from library_api.services.loan_service import LoanService

# === Configuration Fixtures ===


@pytest.fixture
def test_config(tmp_path: Path) -> Generator[ServerConfig, None, None]:
    """Provide a test-specific configuration backed by an in-memory database."""
    reset_config()

    config = ServerConfig(
        database_path=tmp_path / "test_library.db",
        database_url="sqlite://",
        log_level="DEBUG",
        logfire_enabled=False,
        default_page_size=20,
        max_page_size=100,
        late_loan_days=4,
    )

    yield config

    reset_config()


# === Database Fixtures ===


@pytest.fixture
def db_manager(test_config: ServerConfig) -> Generator[DatabaseManager, None, None]:
    manager = DatabaseManager(test_config.get_database_url())
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def test_session(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    session = db_manager.create_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def book_repository(test_session: Session) -> BookRepository:
    return BookRepository(test_session)


@pytest.fixture
def loan_repository(test_session: Session) -> LoanRepository:
    return LoanRepository(test_session)


@pytest.fixture
def book_service(book_repository: BookRepository) -> BookService:
    return BookService(book_repository)


@pytest.fixture
def loan_service(loan_repository: LoanRepository, book_repository: BookRepository) -> LoanService:
    return LoanService(loan_repository, book_repository, late_loan_days=4)


# === Data Factories ===


@pytest.fixture
def make_book(test_session: Session) -> Callable[..., BookDB]:
    """Insert a book row directly, bypassing the services."""

    def _make_book(title: str = "Spring Boot", author: str = "Alan", isbn: str = "001") -> BookDB:
        book = BookDB(title=title, author=author, isbn=isbn)
        test_session.add(book)
        test_session.commit()
        return book

    return _make_book


@pytest.fixture
def make_loan(test_session: Session) -> Callable[..., LoanDB]:
    """Insert a loan row directly, so tests can backdate it."""

    def _make_loan(
        book: BookDB,
        customer: str = "Alan",
        loan_date: date | None = None,
        returned: bool | None = False,
        customer_email: str | None = None,
    ) -> LoanDB:
        loan = LoanDB(
            book_id=book.id,
            customer=customer,
            customer_email=customer_email,
            loan_date=loan_date or date.today(),
            returned=returned,
        )
        test_session.add(loan)
        test_session.commit()
        return loan

    return _make_loan


# === HTTP Fixtures ===


@pytest.fixture
def client(
    test_config: ServerConfig, db_manager: DatabaseManager
) -> Generator[TestClient, None, None]:
    app = create_app(test_config, db_manager=db_manager)
    with TestClient(app) as test_client:
        yield test_client
