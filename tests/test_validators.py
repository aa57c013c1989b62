from decimal import Decimal

import pytest

from biblioteca.exceptions import ValidationFailed
from biblioteca.schemas import AuthorCreate, BookCreate, CategoryCreate, UserCreate, validate
from biblioteca.validators import (
    ContactValidator,
    DateValidator,
    ISBNValidator,
    NumberValidator,
    TextValidator,
)


@pytest.mark.parametrize("isbn,ok", [
    ("9780307474728", True),
    ("978-0-307-47472-8", True),
    ("0307474720", True),
    ("12345", False),
    ("97803074747AB", False),
    ("", False),
])
def test_isbn(isbn, ok):
    assert ISBNValidator.is_valid_isbn(isbn) is ok


def test_text_letters_and_spaces():
    assert TextValidator.validate_text("García Márquez", 2, 50)
    assert not TextValidator.validate_text("R2D2", 2, 50)
    assert not TextValidator.validate_text(" a ", 2, 50)
    assert not TextValidator.validate_text(None)


def test_address_allows_numbers():
    assert TextValidator.validate_address("Calle Principal 123")
    assert TextValidator.validate_address("Av. Central #45, 2º")
    assert not TextValidator.validate_address("Abc")


def test_contact():
    assert ContactValidator.is_valid_email("juan.perez@email.com")
    assert not ContactValidator.is_valid_email("juan@")
    assert ContactValidator.is_valid_phone("12345678")
    assert not ContactValidator.is_valid_phone("1234567")
    assert not ContactValidator.is_valid_phone("1234-5678")


def test_numbers():
    assert NumberValidator.parse_int(" 7 ", 1, 10) == 7
    assert NumberValidator.parse_int("11", 1, 10) is None
    assert NumberValidator.parse_int("x") is None
    assert NumberValidator.parse_decimal("2.345", Decimal("0.01"), Decimal("10")) == Decimal("2.34")
    assert NumberValidator.parse_decimal("nan") is None
    assert NumberValidator.parse_decimal("abc") is None


def test_dates():
    assert DateValidator.is_valid_date("29/02/2024")
    assert not DateValidator.is_valid_date("29/02/2023")
    assert not DateValidator.is_valid_date("2024-02-29")


def test_book_form_errors_by_field():
    with pytest.raises(ValidationFailed) as excinfo:
        validate(BookCreate, title="X", isbn="123", author_id=0, category_id=1, publication_year=1200,
                 total_copies=0)
    assert set(excinfo.value.errors) == {"title", "isbn", "author_id", "publication_year", "total_copies"}


def test_book_form_normalizes_isbn():
    book = validate(BookCreate, title="Ficciones", isbn="978-84-322-4866-5", author_id=1, category_id=1,
                    publication_year=1944, total_copies=4)
    assert book.isbn == "9788432248665"


def test_user_form():
    user = validate(UserCreate, first_name="  Juan ", last_name="Pérez", email="juan@email.com",
                    phone="12345678", address="Calle Principal 123")
    assert user.first_name == "Juan"

    with pytest.raises(ValidationFailed) as excinfo:
        validate(UserCreate, first_name="Juan", last_name="Pérez", email="nope", phone="12",
                 address="Calle Principal 123")
    assert set(excinfo.value.errors) == {"email", "phone"}


def test_category_and_author_bounds():
    with pytest.raises(ValidationFailed):
        validate(CategoryCreate, name="Ab", description="Corta descripcion")
    with pytest.raises(ValidationFailed):
        validate(CategoryCreate, name="Arte", description="Arte")
    with pytest.raises(ValidationFailed):
        validate(AuthorCreate, first_name="Jorge", last_name="Borges", nationality="A")
