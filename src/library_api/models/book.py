"""
Book models for the Library API.

``Book`` is the representation returned by repositories and services. The
other schemas describe what clients may send when creating, updating or
searching books.
"""

from pydantic import BaseModel, ConfigDict, Field


class Book(BaseModel):
    """A book in the library catalog."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Spring Boot",
                "author": "Alan",
                "isbn": "001",
            }
        },
    )

    id: int = Field(..., description="Identifier assigned by the database")
    title: str = Field(..., description="The title of the book")
    author: str = Field(..., description="The book's author")
    isbn: str = Field(..., description="Isbn, unique across the catalog")


class BookCreate(BaseModel):
    """Payload for registering a new book. Every field is required."""

    title: str = Field(..., min_length=1, max_length=500, examples=["Spring Boot"])
    author: str = Field(..., min_length=1, max_length=200, examples=["Alan"])
    isbn: str = Field(..., min_length=1, max_length=50, examples=["001"])


class BookUpdate(BaseModel):
    """Payload for updating a book. The isbn cannot be changed once registered."""

    title: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=200)


class BookFilter(BaseModel):
    """
    Partial-match filter for book searches.

    Each field that is set must appear, ignoring case, somewhere in the
    corresponding stored value. Empty fields are ignored.
    """

    title: str | None = None
    author: str | None = None
    isbn: str | None = None

    def active_fields(self) -> dict[str, str]:
        """Return the filter fields that actually constrain the search."""
        return {name: value for name, value in self.model_dump().items() if value}
