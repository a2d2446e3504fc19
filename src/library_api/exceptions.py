"""
Error taxonomy for the Library API.

Services raise these exceptions; the request-handling layer converts them to
``{"errors": [...]}`` responses (see ``library_api.api.errors``):

- BusinessRuleViolation -> 400
- NotFoundError -> 404
- InvalidArgumentError -> 400
"""


class LibraryError(Exception):
    """Base class for every domain error raised by the services."""

    default_message = "Library operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BusinessRuleViolation(LibraryError):
    """A request was well formed but breaks one of the library's rules."""

    default_message = "Business rule violated"


class DuplicateIsbnError(BusinessRuleViolation):
    default_message = "Isbn already registered"


class BookAlreadyLoanedError(BusinessRuleViolation):
    default_message = "Book already loaned"


class LoanReopenError(BusinessRuleViolation):
    default_message = "A returned loan cannot be reopened"


class BookInUseError(BusinessRuleViolation):
    default_message = "Book has loans and cannot be deleted"


class NotFoundError(LibraryError):
    """The referenced entity does not exist."""

    default_message = "Resource not found"


class BookNotFoundError(NotFoundError):
    default_message = "Book not found"


class LoanNotFoundError(NotFoundError):
    default_message = "Loan not found"


class InvalidArgumentError(LibraryError, ValueError):
    """A service was called with an argument it cannot work with (e.g. a null id)."""

    default_message = "Invalid argument"
