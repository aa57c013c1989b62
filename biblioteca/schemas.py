"""Input models for the console forms.

The services trust the values they receive; everything typed by the
operator goes through one of these models first.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from biblioteca.config import settings
from biblioteca.exceptions import ValidationFailed
from biblioteca.models import to_amount
from biblioteca.validators import ContactValidator, ISBNValidator, TextValidator

M = TypeVar("M", bound=BaseModel)


def _check_text(value: Optional[str], min_length: int, max_length: int) -> Optional[str]:
    if value is None:
        return None
    if not TextValidator.validate_text(value, min_length, max_length):
        raise ValueError(f"must be {min_length}-{max_length} characters of letters and spaces")
    return value.strip()


def _check_address(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not TextValidator.validate_address(value):
        raise ValueError("must be 5-100 characters (letters, digits, spaces, basic punctuation)")
    return value.strip()


def _check_isbn(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not ISBNValidator.is_valid_isbn(value):
        raise ValueError("must contain 10 or 13 digits")
    return ISBNValidator.normalize_isbn(value)


def _check_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not ContactValidator.is_valid_email(value):
        raise ValueError("invalid e-mail address, e.g. usuario@dominio.com")
    return value.strip()


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not ContactValidator.is_valid_phone(value):
        raise ValueError("must contain between 8 and 15 digits")
    return value.strip()


class FormModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class AuthorCreate(FormModel):
    first_name: str
    last_name: str
    nationality: str

    @field_validator("first_name", "last_name")
    @classmethod
    def _names(cls, v: str) -> str:
        return _check_text(v, 2, 50)

    @field_validator("nationality")
    @classmethod
    def _nationality(cls, v: str) -> str:
        return _check_text(v, 2, 30)


class AuthorUpdate(AuthorCreate):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    nationality: Optional[str] = None


class CategoryCreate(FormModel):
    name: str
    description: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _check_text(v, 3, 50)

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        return _check_text(v, 5, 200)


class CategoryUpdate(CategoryCreate):
    name: Optional[str] = None
    description: Optional[str] = None


class BookCreate(FormModel):
    title: str
    isbn: str
    author_id: int = Field(ge=1)
    category_id: int = Field(ge=1)
    publication_year: int = Field(ge=1500, le=settings.max_publication_year)
    total_copies: int = Field(ge=1, le=1000)

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _check_text(v, 2, 100)

    @field_validator("isbn")
    @classmethod
    def _isbn(cls, v: str) -> str:
        return _check_isbn(v)


class BookUpdate(FormModel):
    # The original edit form accepted any non-empty title here.
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    isbn: Optional[str] = None
    publication_year: Optional[int] = Field(default=None, ge=1500, le=settings.max_publication_year)
    total_copies: Optional[int] = Field(default=None, ge=1, le=1000)

    @field_validator("isbn")
    @classmethod
    def _isbn(cls, v: Optional[str]) -> Optional[str]:
        return _check_isbn(v)


class UserCreate(FormModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str

    @field_validator("first_name", "last_name")
    @classmethod
    def _names(cls, v: str) -> str:
        return _check_text(v, 2, 50)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _check_phone(v)

    @field_validator("address")
    @classmethod
    def _address(cls, v: str) -> str:
        return _check_address(v)


class UserUpdate(UserCreate):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class ManualFineRequest(FormModel):
    user_id: int = Field(ge=1)
    amount: Decimal = Field(ge=settings.manual_fine_min, le=settings.manual_fine_max)
    concept: str = Field(default="", max_length=200)

    @field_validator("amount")
    @classmethod
    def _round(cls, v: Decimal) -> Decimal:
        return to_amount(v)


def _errors_by_field(exc: ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "__root__"
        message = err.get("msg", "invalid value").removeprefix("Value error, ")
        errors.setdefault(field, []).append(message)
    return errors


def validate(model: Type[M], **data) -> M:
    """Build ``model`` from ``data``; raise ``ValidationFailed`` on bad input."""
    try:
        return model(**data)
    except ValidationError as exc:
        errors = _errors_by_field(exc)
        summary = "; ".join(f"{field}: {', '.join(msgs)}" for field, msgs in errors.items())
        raise ValidationFailed(f"Invalid input - {summary}", errors) from exc
