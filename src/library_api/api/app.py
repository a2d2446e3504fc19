"""
FastAPI application factory.

``create_app`` wires configuration, the database manager, routers and
exception handlers together. The schema is created on startup and the engine
disposed on shutdown.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from ..config import ServerConfig, get_config, set_config
from ..database.session import DatabaseManager
from ..observability import initialize_observability
from .dependencies import get_database, get_settings
from .errors import register_exception_handlers
from .routers import books_router, loans_router
from .schemas import HealthResponse

logger = logging.getLogger(__name__)


def create_app(
    config: ServerConfig | None = None,
    db_manager: DatabaseManager | None = None,
) -> FastAPI:
    """
    Build the Library API application.

    Args:
        config: Settings to use; defaults to the global configuration
        db_manager: Database manager to use; defaults to one built from ``config``
    """
    if config is None:
        config = get_config()
    else:
        set_config(config)

    if db_manager is None:
        db_manager = DatabaseManager(config.get_database_url(), echo=config.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db_manager.init_database()
        logger.info("%s %s ready", config.app_name, config.app_version)
        try:
            yield
        finally:
            db_manager.close()
            logger.info("%s shut down", config.app_name)

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        debug=config.debug,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.db_manager = db_manager

    register_exception_handlers(app)
    app.include_router(books_router, prefix=config.api_prefix)
    app.include_router(loans_router, prefix=config.api_prefix)

    @app.get(f"{config.api_prefix}/health", response_model=HealthResponse, tags=["health"])
    def health(
        database: DatabaseManager = Depends(get_database),
        settings: ServerConfig = Depends(get_settings),
    ) -> HealthResponse:
        connected = database.verify_connection()
        return HealthResponse(
            status="ok" if connected else "degraded",
            database=connected,
            version=settings.app_version,
        )

    initialize_observability(config, app=app, engine=db_manager.engine)
    return app
