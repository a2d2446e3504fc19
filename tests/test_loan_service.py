"""Tests for LoanService: lending, returning and late loan detection."""

from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest

from library_api.database.book_repository import BookRepository
from library_api.database.loan_repository import LoanRepository
from library_api.exceptions import (
    BookAlreadyLoanedError,
    BookNotFoundError,
    InvalidArgumentError,
    LoanNotFoundError,
    LoanReopenError,
)
from library_api.models.book import Book
from library_api.services.loan_service import LoanService


class TestCreateLoan:
    def test_create_loan(self, loan_service, make_book):
        book = make_book(isbn="123")

        loan = loan_service.create("123", "Fulano", "fulano@example.com")

        assert loan.id is not None
        assert loan.book.id == book.id
        assert loan.customer == "Fulano"
        assert loan.customer_email == "fulano@example.com"
        assert loan.loan_date == date.today()
        assert loan.returned is False
        assert loan.is_active

    def test_unknown_isbn(self, loan_service, loan_repository):
        with pytest.raises(BookNotFoundError) as exc_info:
            loan_service.create("123", "Fulano")

        assert exc_info.value.message == "Book not found for passed isbn"
        assert loan_repository.count() == 0

    def test_book_already_loaned(self, loan_service, loan_repository, make_book, make_loan):
        book = make_book(isbn="123")
        make_loan(book, customer="Alan")

        with pytest.raises(BookAlreadyLoanedError) as exc_info:
            loan_service.create("123", "Fulano")

        assert exc_info.value.message == "Book already loaned"
        assert loan_repository.count() == 1

    def test_active_loan_blocks_insert(self):
        loans = MagicMock(spec=LoanRepository)
        loans.exists_active_for_book.return_value = True
        books = MagicMock(spec=BookRepository)
        books.get_by_isbn.return_value = Book(id=7, title="Spring Boot", author="Alan", isbn="123")
        service = LoanService(loans, books)

        with pytest.raises(BookAlreadyLoanedError):
            service.create("123", "Fulano")

        loans.exists_active_for_book.assert_called_once_with(7)
        loans.create.assert_not_called()

    def test_unknown_isbn_skips_active_check(self):
        loans = MagicMock(spec=LoanRepository)
        books = MagicMock(spec=BookRepository)
        books.get_by_isbn.return_value = None
        service = LoanService(loans, books)

        with pytest.raises(BookNotFoundError):
            service.create("123", "Fulano")

        loans.exists_active_for_book.assert_not_called()
        loans.create.assert_not_called()

    def test_legacy_null_returned_counts_as_active(self, loan_service, make_book, make_loan):
        make_loan(make_book(isbn="123"), returned=None)

        with pytest.raises(BookAlreadyLoanedError):
            loan_service.create("123", "Fulano")

    def test_book_can_be_lent_again_after_return(self, loan_service, make_book):
        make_book(isbn="123")
        first = loan_service.create("123", "Alan")
        loan_service.mark_returned(first.id)

        second = loan_service.create("123", "Maria")

        assert second.id != first.id
        assert second.is_active


class TestReturnLoan:
    def test_mark_returned(self, loan_service, make_book, make_loan):
        loan = make_loan(make_book())

        returned = loan_service.mark_returned(loan.id)

        assert returned.returned is True
        assert not returned.is_active

    def test_mark_returned_twice(self, loan_service, make_book, make_loan):
        loan = make_loan(make_book())

        loan_service.mark_returned(loan.id)
        again = loan_service.mark_returned(loan.id)

        assert again.returned is True

    def test_mark_returned_missing_loan(self, loan_service):
        with pytest.raises(LoanNotFoundError):
            loan_service.mark_returned(1)

    def test_set_returned_false_keeps_active_loan(self, loan_service, make_book, make_loan):
        loan = make_loan(make_book())

        result = loan_service.set_returned(loan.id, False)

        assert result.id == loan.id
        assert result.is_active

    def test_set_returned_false_cannot_reopen(self, loan_service, make_book, make_loan):
        loan = make_loan(make_book(), returned=True)

        with pytest.raises(LoanReopenError):
            loan_service.set_returned(loan.id, False)

    @pytest.mark.parametrize("returned", [True, False])
    def test_set_returned_missing_loan(self, loan_service, returned):
        with pytest.raises(LoanNotFoundError):
            loan_service.set_returned(99, returned)


class TestFindLoans:
    def test_find_by_isbn_or_customer(self, loan_service, make_book, make_loan):
        make_loan(make_book(isbn="001"), customer="Alan")
        make_loan(make_book(isbn="002"), customer="Maria")
        make_loan(make_book(isbn="003"), customer="Joao")

        page = loan_service.find(isbn="001", customer="Maria", page=0, size=10)

        assert page.total == 2
        assert [loan.isbn for loan in page.content] == ["001", "002"]

    def test_find_rejects_bad_paging(self, loan_service):
        with pytest.raises(InvalidArgumentError):
            loan_service.find(isbn="001", page=-1, size=10)

    def test_list_by_book(self, loan_service, make_book, make_loan):
        book = make_book(isbn="001")
        for customer in ("Alan", "Maria", "Joao"):
            make_loan(book, customer=customer, returned=True)

        page = loan_service.list_by_book(book.id, page=1, size=2)

        assert page.total == 3
        assert [loan.customer for loan in page.content] == ["Joao"]


class TestLateLoans:
    def test_list_late(self, loan_service, make_book, make_loan):
        today = date(2024, 3, 10)
        late = make_loan(make_book(isbn="001"), loan_date=today - timedelta(days=5))
        make_loan(make_book(isbn="002"), loan_date=today - timedelta(days=3))
        make_loan(make_book(isbn="003"), loan_date=today - timedelta(days=5), returned=True)

        loans = loan_service.list_late(today=today)

        assert [loan.id for loan in loans] == [late.id]

    def test_loan_on_threshold_is_not_late(self, loan_service, make_book, make_loan):
        today = date(2024, 3, 10)
        make_loan(make_book(), loan_date=today - timedelta(days=4))

        assert loan_service.list_late(today=today) == []

    def test_custom_threshold(self, loan_service, make_book, make_loan):
        today = date(2024, 3, 10)
        make_loan(make_book(), loan_date=today - timedelta(days=3))

        assert len(loan_service.list_late(2, today=today)) == 1
        assert loan_service.list_late(3, today=today) == []

    def test_negative_threshold(self, loan_service):
        with pytest.raises(InvalidArgumentError):
            loan_service.list_late(-1)
