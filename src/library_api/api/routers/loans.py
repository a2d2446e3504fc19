"""Loan endpoints: lending, returning and searching loans."""

from fastapi import APIRouter, Depends, Query, status

from ...config import ServerConfig
from ...exceptions import BusinessRuleViolation, LoanNotFoundError, NotFoundError
from ...models.loan import LoanCreate, ReturnedLoan
from ...services.loan_service import LoanService
from ..dependencies import get_loan_service, get_settings
from ..schemas import ErrorResponse, LoanResponse, PageResponse

router = APIRouter(
    prefix="/loans",
    tags=["loans"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    },
)


@router.post("", response_model=int, status_code=status.HTTP_201_CREATED)
def create_loan(data: LoanCreate, service: LoanService = Depends(get_loan_service)) -> int:
    """Lend a book and answer with the new loan's id."""
    try:
        loan = service.create(data.isbn, data.customer, data.email)
    except NotFoundError as e:
        # an unknown isbn is a bad request here, not a missing resource
        raise BusinessRuleViolation(e.message) from e
    return loan.id


@router.get("", response_model=PageResponse[LoanResponse])
def find_loans(
    isbn: str | None = None,
    customer: str | None = None,
    page: int = Query(0, description="0-based page index"),
    size: int | None = Query(None, description="Page size"),
    service: LoanService = Depends(get_loan_service),
    config: ServerConfig = Depends(get_settings),
) -> PageResponse[LoanResponse]:
    """Loans of the book with ``isbn`` or made by ``customer`` (either matches)."""
    size = config.default_page_size if size is None else size
    result = service.find(isbn=isbn, customer=customer, page=page, size=size)
    return PageResponse[LoanResponse].from_page(result, LoanResponse.from_loan)


@router.get("/late", response_model=list[LoanResponse])
def late_loans(
    days: int | None = Query(None, description="Days after which a loan is late"),
    service: LoanService = Depends(get_loan_service),
) -> list[LoanResponse]:
    return [LoanResponse.from_loan(loan) for loan in service.list_late(days)]


@router.get("/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: int, service: LoanService = Depends(get_loan_service)) -> LoanResponse:
    loan = service.get_by_id(loan_id)
    if loan is None:
        raise LoanNotFoundError()
    return LoanResponse.from_loan(loan)


@router.patch("/{loan_id}", response_model=LoanResponse)
def return_book(
    loan_id: int, data: ReturnedLoan, service: LoanService = Depends(get_loan_service)
) -> LoanResponse:
    return LoanResponse.from_loan(service.set_returned(loan_id, data.returned))
