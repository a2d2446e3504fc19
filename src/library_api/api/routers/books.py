"""Book endpoints: catalog CRUD, search and per-book loan history."""

from fastapi import APIRouter, Depends, Query, Response, status

from ...config import ServerConfig
from ...exceptions import BookNotFoundError
from ...models.book import Book, BookCreate, BookFilter, BookUpdate
from ...services.book_service import BookService
from ...services.loan_service import LoanService
from ..dependencies import get_book_service, get_loan_service, get_settings
from ..schemas import ErrorResponse, LoanResponse, PageResponse

router = APIRouter(
    prefix="/books",
    tags=["books"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    },
)


@router.post("", response_model=Book, status_code=status.HTTP_201_CREATED)
def create_book(data: BookCreate, service: BookService = Depends(get_book_service)) -> Book:
    return service.create(data.title, data.author, data.isbn)


@router.get("", response_model=PageResponse[Book])
def find_books(
    title: str | None = None,
    author: str | None = None,
    isbn: str | None = None,
    page: int = Query(0, description="0-based page index"),
    size: int | None = Query(None, description="Page size"),
    service: BookService = Depends(get_book_service),
    config: ServerConfig = Depends(get_settings),
) -> PageResponse[Book]:
    """Books whose title, author and isbn contain the given values, ignoring case."""
    result = service.find(
        BookFilter(title=title, author=author, isbn=isbn),
        page=page,
        size=config.default_page_size if size is None else size,
    )
    return PageResponse[Book].from_page(result)


@router.get("/{book_id}", response_model=Book)
def get_book(book_id: int, service: BookService = Depends(get_book_service)) -> Book:
    book = service.get_by_id(book_id)
    if book is None:
        raise BookNotFoundError()
    return book


@router.put("/{book_id}", response_model=Book)
def update_book(
    book_id: int, data: BookUpdate, service: BookService = Depends(get_book_service)
) -> Book:
    return service.update(book_id, data.title, data.author)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(book_id: int, service: BookService = Depends(get_book_service)) -> Response:
    service.delete_by_id(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{book_id}/loans", response_model=PageResponse[LoanResponse])
def loans_by_book(
    book_id: int,
    page: int = Query(0, description="0-based page index"),
    size: int | None = Query(None, description="Page size"),
    book_service: BookService = Depends(get_book_service),
    loan_service: LoanService = Depends(get_loan_service),
    config: ServerConfig = Depends(get_settings),
) -> PageResponse[LoanResponse]:
    if book_service.get_by_id(book_id) is None:
        raise BookNotFoundError()

    size = config.default_page_size if size is None else size
    result = loan_service.list_by_book(book_id, page=page, size=size)
    return PageResponse[LoanResponse].from_page(result, LoanResponse.from_loan)
