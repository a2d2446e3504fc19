"""HTTP layer of the Library API, built on FastAPI."""

from .app import create_app

__all__ = ["create_app"]
