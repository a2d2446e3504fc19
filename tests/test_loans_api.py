"""HTTP tests for the loan endpoints."""

from datetime import date, timedelta

import pytest


@pytest.fixture
def book(client):
    response = client.post("/books", json={"title": "Spring Boot", "author": "Alan", "isbn": "123"})
    assert response.status_code == 201
    return response.json()


def lend(client, isbn="123", customer="Fulano", **extra):
    return client.post("/loans", json={"isbn": isbn, "customer": customer, **extra})


class TestCreateLoanEndpoint:
    def test_create_loan_returns_id(self, client, book):
        response = lend(client, email="customer@email.com")

        assert response.status_code == 201
        loan_id = response.json()
        assert isinstance(loan_id, int)

        loan = client.get(f"/loans/{loan_id}").json()
        assert loan["isbn"] == "123"
        assert loan["customer"] == "Fulano"
        assert loan["email"] == "customer@email.com"
        assert loan["loanDate"] == date.today().isoformat()
        assert loan["returned"] is False
        assert loan["book"] == book

    def test_unknown_isbn(self, client):
        response = lend(client)

        assert response.status_code == 400
        assert response.json() == {"errors": ["Book not found for passed isbn"]}

    def test_book_already_loaned(self, client, book):
        lend(client)

        response = lend(client, customer="Beltrano")

        assert response.status_code == 400
        assert response.json() == {"errors": ["Book already loaned"]}

    def test_invalid_payload(self, client):
        response = client.post("/loans", json={"customer": "Fulano", "email": "not-an-email"})

        assert response.status_code == 400
        fields = {error.split(":")[0] for error in response.json()["errors"]}
        assert fields == {"isbn", "email"}


class TestReturnLoanEndpoint:
    def test_return_book(self, client, book):
        loan_id = lend(client).json()

        response = client.patch(f"/loans/{loan_id}", json={"returned": True})

        assert response.status_code == 200
        assert response.json()["returned"] is True
        assert lend(client, customer="Beltrano").status_code == 201

    def test_return_twice(self, client, book):
        loan_id = lend(client).json()
        client.patch(f"/loans/{loan_id}", json={"returned": True})

        response = client.patch(f"/loans/{loan_id}", json={"returned": True})

        assert response.status_code == 200

    def test_return_missing_loan(self, client):
        response = client.patch("/loans/1", json={"returned": True})

        assert response.status_code == 404
        assert response.json() == {"errors": ["Loan not found"]}

    def test_cannot_reopen(self, client, book):
        loan_id = lend(client).json()
        client.patch(f"/loans/{loan_id}", json={"returned": True})

        response = client.patch(f"/loans/{loan_id}", json={"returned": False})

        assert response.status_code == 400
        assert response.json() == {"errors": ["A returned loan cannot be reopened"]}

    def test_returned_flag_is_required(self, client, book):
        loan_id = lend(client).json()

        assert client.patch(f"/loans/{loan_id}", json={}).status_code == 400


class TestFindLoansEndpoint:
    def test_filters_use_or(self, client):
        for isbn, customer in [("001", "Alan"), ("002", "Maria"), ("003", "Joao")]:
            client.post("/books", json={"title": "Book", "author": "Someone", "isbn": isbn})
            lend(client, isbn=isbn, customer=customer)

        response = client.get(
            "/loans", params={"isbn": "001", "customer": "Maria", "page": 0, "size": 10}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["totalElements"] == 2
        assert [loan["customer"] for loan in body["content"]] == ["Alan", "Maria"]
        assert body["pageable"]["pageSize"] == 10

    def test_missing_loan(self, client):
        assert client.get("/loans/42").status_code == 404

    def test_zero_page_size_is_rejected(self, client):
        response = client.get("/loans", params={"size": 0})

        assert response.status_code == 400
        assert response.json() == {"errors": ["Page size must be between 1 and 100"]}


class TestLateLoansEndpoint:
    def test_late_loans(self, client, make_book, make_loan):
        today = date.today()
        late = make_loan(make_book(isbn="001"), loan_date=today - timedelta(days=5))
        make_loan(make_book(isbn="002"), loan_date=today - timedelta(days=3))
        make_loan(make_book(isbn="003"), loan_date=today - timedelta(days=5), returned=True)

        response = client.get("/loans/late")

        assert response.status_code == 200
        assert [loan["id"] for loan in response.json()] == [late.id]

    def test_late_loans_with_threshold(self, client, make_book, make_loan):
        make_loan(make_book(isbn="001"), loan_date=date.today() - timedelta(days=3))

        assert len(client.get("/loans/late", params={"days": 2}).json()) == 1
        assert client.get("/loans/late", params={"days": -1}).status_code == 400
