"""
Generic data access for the Library API.

Repositories wrap one SQLAlchemy session and return pydantic models, never
ORM rows, so nothing above this package imports SQLAlchemy. ``BaseRepository``
covers lookups by id, writes and paging; ``BookRepository`` and
``LoanRepository`` add the queries their services need.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, computed_field
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from .schema import Base
from .session import (
    DuplicateError,
    IntegrityViolationError,
    RepositoryException,
    safe_commit,
    safe_query,
)

ModelType = TypeVar("ModelType", bound=Base)
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)
ItemType = TypeVar("ItemType")


class PaginationParams(BaseModel):
    """Offset/limit pagination with a 0-based page index."""

    page: int = 0
    size: int = 20

    @property
    def offset(self) -> int:
        return self.page * self.size

    def validate_params(self, max_size: int = 100) -> None:
        """Raise ValueError for a negative page or a size outside 1..max_size."""
        if self.page < 0:
            raise ValueError("Page index must not be less than zero")
        if self.size < 1 or self.size > max_size:
            raise ValueError(f"Page size must be between 1 and {max_size}")


class Page(BaseModel, Generic[ItemType]):
    """
    A slice of an ordered result set plus the total number of matches.

    ``page`` is the 0-based index of this slice and ``size`` the requested
    slice length; ``content`` may be shorter on the last page.
    """

    content: list[ItemType]
    total: int
    page: int
    size: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return (self.total + self.size - 1) // self.size if self.size else 0

    @property
    def has_next(self) -> bool:
        return (self.page + 1) * self.size < self.total

    @property
    def has_previous(self) -> bool:
        return self.page > 0


class BaseRepository(ABC, Generic[ModelType, ResponseSchemaType]):
    """
    CRUD over one table, typed by its ORM class and its pydantic model.

    Reads go through safe_query and writes through safe_commit, so callers
    only ever see RepositoryException subclasses.
    """

    def __init__(self, session: Session):
        self.session = session

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """ORM class of the table."""

    @property
    @abstractmethod
    def response_schema(self) -> type[ResponseSchemaType]:
        """Pydantic model rows are converted to."""

    def _to_response_model(self, db_obj: ModelType) -> ResponseSchemaType:
        return self.response_schema.model_validate(db_obj, from_attributes=True)

    def _get_db_obj(self, id: int) -> ModelType | None:
        return safe_query(
            self.session,
            lambda s: s.get(self.model_class, id),
            f"Failed to load {self.model_class.__name__} {id}",
        )

    def get_by_id(self, id: int) -> ResponseSchemaType | None:
        """Return the row with this id as a model, or None."""
        db_obj = self._get_db_obj(id)
        if db_obj is None:
            return None
        return self._to_response_model(db_obj)

    def create(self, data: BaseModel | dict[str, Any]) -> ResponseSchemaType:
        """
        Insert a row built from ``data`` and return it with its id.

        Raises:
            DuplicateError: a unique constraint rejected the row
            RepositoryException: the insert failed for another reason
        """
        values = data.model_dump() if isinstance(data, BaseModel) else dict(data)
        db_obj = self.model_class(**values)
        self.session.add(db_obj)
        safe_commit(self.session, f"create {self.model_class.__name__}")
        self.session.refresh(db_obj)
        return self._to_response_model(db_obj)

    def update(self, id: int, data: BaseModel | dict[str, Any]) -> ResponseSchemaType | None:
        """
        Overwrite the fields present in ``data``.

        Returns:
            The updated model, or None when no row has this id
        """
        db_obj = self._get_db_obj(id)
        if db_obj is None:
            return None

        values = data.model_dump(exclude_unset=True) if isinstance(data, BaseModel) else data
        for field, value in values.items():
            setattr(db_obj, field, value)

        safe_commit(self.session, f"update {self.model_class.__name__}")
        self.session.refresh(db_obj)
        return self._to_response_model(db_obj)

    def delete(self, id: int) -> bool:
        """
        Delete the row with this id.

        Returns:
            False when no row has this id
        """
        db_obj = self._get_db_obj(id)
        if db_obj is None:
            return False

        self.session.delete(db_obj)
        safe_commit(self.session, f"delete {self.model_class.__name__}")
        return True

    def exists(self, id: int) -> bool:
        query = select(func.count()).select_from(self.model_class).where(self.model_class.id == id)
        count = safe_query(
            self.session,
            lambda s: s.execute(query).scalar(),
            f"Failed to look up {self.model_class.__name__} {id}",
        )
        return bool(count)

    def count(self) -> int:
        """Count every row of the table."""
        query = select(func.count()).select_from(self.model_class)
        return safe_query(self.session, lambda s: s.execute(query).scalar(), "Failed to count") or 0

    def _paginate(
        self, query: Select, pagination: PaginationParams | None = None
    ) -> Page[ResponseSchemaType]:
        """
        Run ``query`` for one page and count every row it would match.

        The query must already carry its filters and ordering.
        """
        pagination = pagination or PaginationParams()

        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total = (
            safe_query(
                self.session,
                lambda s: s.execute(count_query).scalar(),
                f"Failed to count {self.model_class.__name__} rows",
            )
            or 0
        )

        page_query = query.offset(pagination.offset).limit(pagination.size)
        rows = safe_query(
            self.session,
            lambda s: s.execute(page_query).unique().scalars().all(),
            f"Failed to page {self.model_class.__name__} rows",
        )

        return Page[self.response_schema](  # type: ignore[name-defined]
            content=[self._to_response_model(row) for row in rows],
            total=total,
            page=pagination.page,
            size=pagination.size,
        )


__all__ = [
    "BaseRepository",
    "DuplicateError",
    "IntegrityViolationError",
    "Page",
    "PaginationParams",
    "RepositoryException",
]
