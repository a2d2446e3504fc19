"""
FastAPI dependency providers.

Each request gets one database session; services are built on top of it so a
service operation runs inside a single transaction.
"""

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..config import ServerConfig
from ..database.book_repository import BookRepository
from ..database.loan_repository import LoanRepository
from ..database.session import DatabaseManager
from ..services.book_service import BookService
from ..services.loan_service import LoanService


def get_settings(request: Request) -> ServerConfig:
    return request.app.state.config


def get_database(request: Request) -> DatabaseManager:
    return request.app.state.db_manager


def get_session(db_manager: DatabaseManager = Depends(get_database)) -> Generator[Session, None, None]:
    with db_manager.session_scope() as session:
        yield session


def get_book_service(
    session: Session = Depends(get_session),
    config: ServerConfig = Depends(get_settings),
) -> BookService:
    return BookService(BookRepository(session), max_page_size=config.max_page_size)


def get_loan_service(
    session: Session = Depends(get_session),
    config: ServerConfig = Depends(get_settings),
) -> LoanService:
    return LoanService(
        LoanRepository(session),
        BookRepository(session),
        max_page_size=config.max_page_size,
        late_loan_days=config.late_loan_days,
    )
