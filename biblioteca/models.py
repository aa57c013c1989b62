from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Optional

# On-disk date format shared by every collection file
DATE_FORMAT = "%d/%m/%Y"
CENTS = Decimal("0.01")


def format_date(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(DATE_FORMAT)


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return datetime.strptime(value, DATE_FORMAT).date()


def to_amount(value) -> Decimal:
    """Normalise a currency value to a 2-place Decimal (banker's rounding)."""
    return Decimal(str(value)).quantize(CENTS)


class LoanStatus(str, Enum):
    ACTIVE = "activo"
    RETURNED = "devuelto"
    # Never assigned: overdue is computed from the dates at read time.
    OVERDUE = "vencido"


class FineStatus(str, Enum):
    PENDING = "pendiente"
    PAID = "pagada"


class Author:
    """An author of one or more books."""

    def __init__(self, id: int, first_name: str, last_name: str, nationality: str) -> None:
        self.id = id
        self.first_name = first_name.strip()
        self.last_name = last_name.strip()
        self.nationality = nationality.strip()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.full_name} ({self.nationality})"

    def to_dict(self) -> dict:
        return {
            "Id": self.id,
            "Nombre": self.first_name,
            "Apellido": self.last_name,
            "Nacionalidad": self.nationality,
        }

    @staticmethod
    def from_dict(data: dict) -> "Author":
        return Author(
            id=data["Id"],
            first_name=data.get("Nombre") or "",
            last_name=data.get("Apellido") or "",
            nationality=data.get("Nacionalidad") or "",
        )


class Category:
    def __init__(self, id: int, name: str, description: str = "") -> None:
        self.id = id
        self.name = name.strip()
        self.description = (description or "").strip()

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return self.name

    def to_dict(self) -> dict:
        return {"Id": self.id, "Nombre": self.name, "Descripcion": self.description}

    @staticmethod
    def from_dict(data: dict) -> "Category":
        return Category(id=data["Id"], name=data.get("Nombre") or "", description=data.get("Descripcion") or "")


class Book:
    """A catalogued title and its copy counts.

    ``available_copies`` stays within ``0..total_copies``; loans move it down
    and returns move it back up.
    """

    def __init__(self, id: int, title: str, isbn: str, author_id: int, category_id: int,
                 publication_year: int, total_copies: int, available_copies: int | None = None,
                 active: bool = True) -> None:
        self.id = id
        self.title = title.strip()
        self.isbn = isbn.strip()
        self.author_id = author_id
        self.category_id = category_id
        self.publication_year = publication_year
        self.total_copies = total_copies
        self.available_copies = total_copies if available_copies is None else available_copies
        self.active = active

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} (ISBN: {self.isbn})"

    def to_dict(self) -> dict:
        return {
            "Id": self.id,
            "Titulo": self.title,
            "Isbn": self.isbn,
            "IdAutor": self.author_id,
            "IdCategoria": self.category_id,
            "AñoPublicacion": self.publication_year,
            "CantidadCopias": self.total_copies,
            "CopiasDisponibles": self.available_copies,
            "Activo": self.active,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            id=data["Id"],
            title=data.get("Titulo") or "",
            isbn=data.get("Isbn") or "",
            author_id=data.get("IdAutor", 0),
            category_id=data.get("IdCategoria", 0),
            publication_year=data.get("AñoPublicacion", 0),
            total_copies=data.get("CantidadCopias", 0),
            available_copies=data.get("CopiasDisponibles", 0),
            active=bool(data.get("Activo", False)),
        )


class User:
    """A library member.

    ``pending_fines`` counts the member's unpaid fines; any value above zero
    blocks new loans.
    """

    def __init__(self, id: int, first_name: str, last_name: str, email: str, phone: str,
                 address: str, active: bool = True, pending_fines: int = 0) -> None:
        self.id = id
        self.first_name = first_name.strip()
        self.last_name = last_name.strip()
        self.email = email.strip()
        self.phone = phone.strip()
        self.address = address.strip()
        self.active = active
        self.pending_fines = pending_fines

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.full_name} <{self.email}>"

    def to_dict(self) -> dict:
        return {
            "Id": self.id,
            "Nombre": self.first_name,
            "Apellido": self.last_name,
            "Email": self.email,
            "Telefono": self.phone,
            "Direccion": self.address,
            "Activo": self.active,
            "MultasPendientes": self.pending_fines,
        }

    @staticmethod
    def from_dict(data: dict) -> "User":
        return User(
            id=data["Id"],
            first_name=data.get("Nombre") or "",
            last_name=data.get("Apellido") or "",
            email=data.get("Email") or "",
            phone=data.get("Telefono") or "",
            address=data.get("Direccion") or "",
            active=bool(data.get("Activo", False)),
            pending_fines=data.get("MultasPendientes", 0),
        )


class Loan:
    """One copy of one book lent to one user: ``active -> returned``."""

    def __init__(self, id: int, user_id: int, book_id: int, loan_date: date,
                 expected_return_date: date, actual_return_date: date | None = None,
                 status: LoanStatus = LoanStatus.ACTIVE, fine_generated: bool = False) -> None:
        self.id = id
        self.user_id = user_id
        self.book_id = book_id
        self.loan_date = loan_date
        self.expected_return_date = expected_return_date
        self.actual_return_date = actual_return_date
        self.status = LoanStatus(status)
        self.fine_generated = fine_generated

    @property
    def is_returned(self) -> bool:
        return self.status == LoanStatus.RETURNED

    def days_late(self, now: datetime) -> int:
        """Whole days between the expected return date (at midnight) and ``now``."""
        due = datetime.combine(self.expected_return_date, time.min)
        return max(0, (now - due).days)

    def is_overdue(self, now: datetime) -> bool:
        return self.status == LoanStatus.ACTIVE and now.date() > self.expected_return_date

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"Loan #{self.id}: book {self.book_id} -> user {self.user_id} ({self.status.value})"

    def to_dict(self) -> dict:
        return {
            "Id": self.id,
            "IdUsuario": self.user_id,
            "IdLibro": self.book_id,
            "FechaPrestamo": format_date(self.loan_date),
            "FechaDevolucionEsperada": format_date(self.expected_return_date),
            "FechaDevolucionReal": format_date(self.actual_return_date),
            "Estado": self.status.value,
            "MultaGenerada": self.fine_generated,
        }

    @staticmethod
    def from_dict(data: dict) -> "Loan":
        return Loan(
            id=data["Id"],
            user_id=data["IdUsuario"],
            book_id=data["IdLibro"],
            loan_date=parse_date(data.get("FechaPrestamo")),
            expected_return_date=parse_date(data.get("FechaDevolucionEsperada")),
            actual_return_date=parse_date(data.get("FechaDevolucionReal")),
            status=data.get("Estado") or LoanStatus.ACTIVE,
            fine_generated=bool(data.get("MultaGenerada", False)),
        )


class Fine:
    """A monetary penalty owed by a user: ``pending -> paid``."""

    def __init__(self, id: int, user_id: int, amount, concept: str, generation_date: date,
                 payment_date: date | None = None, status: FineStatus = FineStatus.PENDING) -> None:
        self.id = id
        self.user_id = user_id
        self.amount = to_amount(amount)
        self.concept = concept or ""
        self.generation_date = generation_date
        self.payment_date = payment_date
        self.status = FineStatus(status)

    @property
    def is_paid(self) -> bool:
        return self.status == FineStatus.PAID

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"Fine #{self.id}: ${self.amount:.2f} ({self.status.value})"

    def to_dict(self) -> dict:
        return {
            "Id": self.id,
            "IdUsuario": self.user_id,
            "Monto": float(self.amount),
            "Concepto": self.concept,
            "FechaGeneracion": format_date(self.generation_date),
            "FechaPago": format_date(self.payment_date),
            "Estado": self.status.value,
        }

    @staticmethod
    def from_dict(data: dict) -> "Fine":
        return Fine(
            id=data["Id"],
            user_id=data["IdUsuario"],
            amount=data.get("Monto", 0),
            concept=data.get("Concepto") or "",
            generation_date=parse_date(data.get("FechaGeneracion")),
            payment_date=parse_date(data.get("FechaPago")),
            status=data.get("Estado") or FineStatus.PENDING,
        )
