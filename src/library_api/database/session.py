"""
Engine and session handling for the Library API.

``DatabaseManager`` owns one engine and hands out sessions. The HTTP layer
opens one ``session_scope`` per request (see ``library_api.api.dependencies``)
and the CLI opens one per command.

Database errors are translated into the repository exceptions below in two
places only: ``safe_commit`` for writes and ``safe_query`` for reads.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from .schema import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RepositoryException(Exception):
    """A database operation behind a repository failed."""


class DuplicateError(RepositoryException):
    """A write collided with a unique constraint."""


class IntegrityViolationError(RepositoryException):
    """A write broke a foreign key or another integrity constraint."""


def _enable_foreign_keys(dbapi_connection, connection_record):  # noqa: ARG001
    # SQLite ships with foreign key enforcement switched off
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def _build_engine(database_url: str, echo: bool) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            echo=echo,
        )

    # one shared connection keeps "sqlite://" alive across sessions
    engine = create_engine(
        database_url,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=echo,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


class DatabaseManager:
    """
    Owner of the engine and session factory for one database.

    Both are created on first use, so building a manager never touches the
    database.
    """

    def __init__(self, database_url: str | None = None, echo: bool = False):
        """
        Args:
            database_url: SQLAlchemy URL; the configured URL when omitted
            echo: Log every SQL statement
        """
        if database_url is None:
            database_url = get_config().get_database_url()
            logger.info("No database URL given, using %s", database_url)

        self.database_url = database_url
        self.echo = echo
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = _build_engine(self.database_url, self.echo)
            logger.info("Opened database engine for %s", self._engine.url)
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            # rows stay readable after commit; repositories convert them afterwards
            self._session_factory = sessionmaker(
                bind=self.engine,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_session(self) -> Session:
        """Open a session the caller is responsible for closing."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Yield a session that is committed on success and rolled back on error.

        ```python
        with db_manager.session_scope() as session:
            BookRepository(session).get_by_isbn("001")
        ```
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
        except Exception:
            logger.debug("Rolling back session after error")
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, drop_existing: bool = False) -> None:
        """Create every table that does not exist yet, optionally dropping them first."""
        if drop_existing:
            logger.warning("Dropping book and loan tables")
            Base.metadata.drop_all(bind=self.engine)

        Base.metadata.create_all(bind=self.engine)
        logger.info("Schema ready at %s", self.engine.url)

    def verify_connection(self) -> bool:
        """Return True when a trivial query succeeds (used by the health check)."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Cannot reach database at %s", self.database_url)
            return False
        return True

    def close(self) -> None:
        """Dispose of the engine; the next use opens a fresh one."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Closed database engine")
        self._engine = None
        self._session_factory = None


_db_manager: DatabaseManager | None = None


def get_db_manager(database_url: str | None = None) -> DatabaseManager:
    """
    Return the process-wide manager, creating it on the first call.

    ``database_url`` only matters for that first call.
    """
    global _db_manager  # noqa: PLW0603

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url, echo=get_config().debug)

    return _db_manager


def reset_db_manager() -> None:
    """Close and forget the process-wide manager."""
    global _db_manager  # noqa: PLW0603

    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None


def safe_commit(session: Session, operation: str) -> None:
    """
    Commit ``session``, rolling back and re-raising as a repository exception.

    Raises:
        DuplicateError: a unique constraint rejected the write
        IntegrityViolationError: another integrity constraint rejected it
        RepositoryException: the commit failed for any other reason
    """
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        reason = str(e.orig)
        if "unique" in reason.lower() or "duplicate" in reason.lower():
            raise DuplicateError(f"{operation} failed: {reason}") from e
        raise IntegrityViolationError(f"{operation} failed: {reason}") from e
    except SQLAlchemyError as e:
        session.rollback()
        raise RepositoryException(f"{operation} failed: {e}") from e


def safe_query(session: Session, run: Callable[[Session], T], error_msg: str) -> T:
    """Run ``run(session)``, re-raising database errors as RepositoryException."""
    try:
        return run(session)
    except SQLAlchemyError as e:
        logger.exception("%s", error_msg)
        raise RepositoryException(error_msg) from e
