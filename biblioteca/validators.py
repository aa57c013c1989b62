import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from biblioteca.models import DATE_FORMAT, to_amount

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


class ISBNValidator:
    """ISBN check used by the book forms: 10 or 13 digits, no checksum."""

    @staticmethod
    def normalize_isbn(raw: Optional[str]) -> str:
        if raw is None:
            return ""
        return raw.strip().replace("-", "").replace(" ", "")

    @staticmethod
    def is_valid_isbn(isbn: Optional[str]) -> bool:
        s = ISBNValidator.normalize_isbn(isbn)
        return s.isdigit() and len(s) in (10, 13)


class TextValidator:
    """Length-bounded free text checks."""

    @staticmethod
    def is_letters_and_spaces(text: str) -> bool:
        return all(c.isalpha() or c == " " for c in text)

    @staticmethod
    def validate_text(text: Optional[str], min_length: int = 1, max_length: int = 100) -> bool:
        """Letters and spaces only, trimmed length within bounds."""
        if text is None:
            return False
        t = text.strip()
        if not (min_length <= len(t) <= max_length):
            return False
        return TextValidator.is_letters_and_spaces(t)

    @staticmethod
    def validate_address(text: Optional[str], min_length: int = 5, max_length: int = 100) -> bool:
        # street numbers and punctuation are allowed here
        if text is None:
            return False
        t = text.strip()
        if not (min_length <= len(t) <= max_length):
            return False
        return all(c.isalnum() or c in " .,#-/º°" for c in t)


class ContactValidator:

    @staticmethod
    def is_valid_email(email: Optional[str]) -> bool:
        return bool(email) and EMAIL_PATTERN.match(email.strip()) is not None

    @staticmethod
    def is_valid_phone(phone: Optional[str]) -> bool:
        if phone is None:
            return False
        p = phone.strip()
        return p.isdigit() and 8 <= len(p) <= 15


class NumberValidator:

    @staticmethod
    def parse_int(raw: str, minimum: int = 0, maximum: int = 999999) -> Optional[int]:
        """Return the integer in ``raw`` if it lies within bounds, else None."""
        try:
            value = int(str(raw).strip())
        except (TypeError, ValueError):
            return None
        if value < minimum or value > maximum:
            return None
        return value

    @staticmethod
    def parse_decimal(raw: str, minimum: Decimal = Decimal("0.00"),
                      maximum: Decimal = Decimal("999999.99")) -> Optional[Decimal]:
        """Return ``raw`` rounded to 2 places if it lies within bounds, else None."""
        try:
            value = Decimal(str(raw).strip())
        except (InvalidOperation, TypeError):
            return None
        if not value.is_finite() or value < minimum or value > maximum:
            return None
        return to_amount(value)


class DateValidator:

    @staticmethod
    def is_valid_date(raw: Optional[str]) -> bool:
        """True for a real calendar date written as dd/mm/yyyy."""
        if not raw:
            return False
        try:
            datetime.strptime(raw.strip(), DATE_FORMAT)
        except ValueError:
            return False
        return True
