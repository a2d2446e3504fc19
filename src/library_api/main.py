"""ASGI entry point: ``uvicorn library_api.main:app``."""

from .api import create_app
from .config import get_config
from .observability import configure_logging

configure_logging(get_config())

app = create_app()
