"""Logging and Logfire observability for the Library API."""

import logging
import sys

import logfire
from fastapi import FastAPI
from sqlalchemy.engine import Engine

from .config import ServerConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: ServerConfig) -> None:
    """Send application logs to stderr at the configured level."""
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("library_api").setLevel(config.log_level)


def initialize_observability(
    config: ServerConfig,
    app: FastAPI | None = None,
    engine: Engine | None = None,
) -> bool:
    """
    Configure Logfire and instrument the web app and database engine.

    Logfire is always configured so the spans opened by the services have a
    home, but nothing leaves the process unless ``logfire_enabled`` is set.

    Returns:
        True when traces are exported to Logfire
    """
    if not config.logfire_enabled:
        logfire.configure(
            send_to_logfire=False,
            console=False,
            service_name=config.app_name,
            service_version=config.app_version,
            environment=config.environment,
        )
        logger.debug("Logfire export disabled via configuration")
        return False

    logfire.configure(
        token=config.logfire_token,
        send_to_logfire="if-token-present",
        console=False,
        service_name=config.app_name,
        service_version=config.app_version,
        environment=config.environment,
    )

    if app is not None:
        logfire.instrument_fastapi(app)
    if engine is not None:
        logfire.instrument_sqlalchemy(engine=engine)

    logger.info("Logfire observability enabled (%s)", config.environment)
    return True
