"""Error types raised by the library services.

Every error is recoverable: the failing operation aborts and reports why,
and nothing already written to disk is rolled back.
"""

from __future__ import annotations

from typing import Dict, List


class LibraryError(Exception):
    """Base exception for library system errors."""


# --- Not found ------------------------------------------------------------ #

class NotFoundError(LibraryError, LookupError):
    """A record id is absent from its collection."""

    entity = "record"

    def __init__(self, record_id: int) -> None:
        self.record_id = record_id
        super().__init__(f"No {self.entity} found with ID {record_id}")


class UserNotFound(NotFoundError):
    entity = "user"


class BookNotFound(NotFoundError):
    entity = "book"


class LoanNotFound(NotFoundError):
    entity = "loan"


class FineNotFound(NotFoundError):
    entity = "fine"


class AuthorNotFound(NotFoundError):
    entity = "author"


class CategoryNotFound(NotFoundError):
    entity = "category"


# --- Terminal states ------------------------------------------------------ #

class AlreadyInTerminalState(LibraryError):
    """The record already reached its final state."""


class LoanAlreadyReturned(AlreadyInTerminalState):
    def __init__(self, loan_id: int) -> None:
        self.loan_id = loan_id
        super().__init__(f"Loan #{loan_id} was already returned")


class FineAlreadyPaid(AlreadyInTerminalState):
    def __init__(self, fine_id: int) -> None:
        self.fine_id = fine_id
        super().__init__(f"Fine #{fine_id} was already paid")


# --- Eligibility / capacity ----------------------------------------------- #

class NotEligibleError(LibraryError):
    """The user or book cannot take part in a new loan."""


class UserNotEligible(NotEligibleError):
    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found or inactive")


class UserHasPendingFines(NotEligibleError):
    def __init__(self, user_id: int, pending: int) -> None:
        self.user_id = user_id
        self.pending = pending
        super().__init__(f"User {user_id} has {pending} pending fines and must pay them first")


class BookNotAvailable(NotEligibleError):
    def __init__(self, book_id: int) -> None:
        self.book_id = book_id
        super().__init__(f"Book {book_id} not found or inactive")


class NoCapacityError(LibraryError):
    """No capacity left for the requested operation."""


class NoCopiesAvailable(NoCapacityError):
    def __init__(self, book_id: int) -> None:
        self.book_id = book_id
        super().__init__(f"No copies of book {book_id} are available")


# --- Input / storage ------------------------------------------------------ #

class ValidationFailed(LibraryError, ValueError):
    """Input rejected at the validation boundary."""

    def __init__(self, message: str, errors: Dict[str, List[str]] | None = None) -> None:
        self.errors = errors or {}
        super().__init__(message)


class StorageError(LibraryError):
    """A collection or counter file could not be read or written."""
