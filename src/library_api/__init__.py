"""
Library API Package.

A small library-management REST backend: a book catalog with unique isbns
and a lending workflow that allows one active loan per book.

Key Components:
- models: Pydantic models for books, loans and request payloads
- database: SQLAlchemy schema, session management and repositories
- services: Business rules (isbn uniqueness, single active loan)
- api: FastAPI routers, dependencies and error handlers
- config: Configuration management with pydantic-settings
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
