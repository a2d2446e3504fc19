"""
Exception handlers turning errors into ``{"errors": [...]}`` responses.

Status policy:
- request validation failures -> 400, one message per failing field
- BusinessRuleViolation, InvalidArgumentError -> 400, single message
- NotFoundError -> 404, single message
- anything raised by the repositories -> 500, logged with traceback

The loans router reports an unknown isbn on loan creation as a 400 before
these handlers see it.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..database.session import RepositoryException
from ..exceptions import (
    BusinessRuleViolation,
    InvalidArgumentError,
    LibraryError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def error_response(status_code: int, *messages: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"errors": list(messages)})


def format_validation_error(error: dict) -> str:
    """Render one pydantic error as ``"<field>: <message>"``."""
    loc = [str(part) for part in error.get("loc", ())]
    if len(loc) > 1 and loc[0] in _LOCATION_PREFIXES:
        loc = loc[1:]
    field = ".".join(loc)
    message = error.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = [format_validation_error(error) for error in exc.errors()]
    logger.warning("Invalid request to %s: %s", request.url.path, messages)
    return error_response(status.HTTP_400_BAD_REQUEST, *messages)


async def library_exception_handler(request: Request, exc: LibraryError):
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, BusinessRuleViolation | InvalidArgumentError):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(status_code, exc.message)


async def repository_exception_handler(request: Request, exc: RepositoryException):
    logger.error(
        "Database failure on %s %s", request.method, request.url.path, exc_info=exc
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(LibraryError, library_exception_handler)
    app.add_exception_handler(RepositoryException, repository_exception_handler)
