"""Loan engine: checkout and return of book copies.

Checkout and return touch several collection files one after another; each
save is independent, so an interrupted operation can leave, for example, a
decremented copy count without its loan record.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from biblioteca.exceptions import (
    BookNotAvailable,
    LoanAlreadyReturned,
    LoanNotFound,
    NoCopiesAvailable,
    UserHasPendingFines,
    UserNotEligible,
)
from biblioteca.models import Loan, LoanStatus
from biblioteca.services.base import Clock, Service
from biblioteca.services.fines import FineService
from biblioteca.storage import BOOKS, LOANS, USERS, CounterStore, RecordStore, find_by_id

logger = logging.getLogger(__name__)

LOAN_COUNTER = "prestamos"
DEFAULT_LOAN_DAYS = 14
DEFAULT_DAILY_FEE = Decimal("1.00")


def late_fee_concept(days_late: int, loan_id: int) -> str:
    return f"Retraso de {days_late} días en préstamo #{loan_id}"


class LoanService(Service):

    def __init__(self, store: RecordStore, counters: CounterStore, fines: FineService,
                 clock: Optional[Clock] = None, loan_days: int = DEFAULT_LOAN_DAYS,
                 daily_fee: Decimal = DEFAULT_DAILY_FEE) -> None:
        super().__init__(store, counters, clock)
        self.fines = fines
        self.loan_days = loan_days
        self.daily_fee = Decimal(daily_fee)

    def create_loan(self, user_id: int, book_id: int) -> Loan:
        """Lend one copy of ``book_id`` to ``user_id``.

        Checks run in a fixed order and the first failure wins: user
        exists and is active, user has no pending fines, book exists and is
        active, book has a free copy.
        """
        with self.unit() as work:
            user = find_by_id(work.collection(USERS), user_id)
            if user is None or not user.active:
                logger.info("Loan rejected: user %s not eligible", user_id)
                raise UserNotEligible(user_id)
            if user.pending_fines > 0:
                logger.info("Loan rejected: user %s has %d pending fines", user_id, user.pending_fines)
                raise UserHasPendingFines(user_id, user.pending_fines)

            book = find_by_id(work.collection(BOOKS), book_id)
            if book is None or not book.active:
                logger.info("Loan rejected: book %s not available", book_id)
                raise BookNotAvailable(book_id)
            if book.available_copies <= 0:
                logger.info("Loan rejected: no copies left of book %s", book_id)
                raise NoCopiesAvailable(book_id)

            today = self.clock().date()
            loan = Loan(
                id=self.counters.next_id(LOAN_COUNTER),
                user_id=user_id,
                book_id=book_id,
                loan_date=today,
                expected_return_date=today + timedelta(days=self.loan_days),
                actual_return_date=None,
                status=LoanStatus.ACTIVE,
                fine_generated=False,
            )

            book.available_copies -= 1
            work.save(BOOKS)

            work.collection(LOANS).append(loan)
            work.save(LOANS)

        logger.info("Loan #%s: book %s to user %s, due %s", loan.id, book_id, user_id, loan.expected_return_date)
        return loan

    def return_loan(self, loan_id: int) -> Tuple[Loan, Optional[Decimal]]:
        """Close ``loan_id``; returns the loan and the late fee charged, if any."""
        with self.unit() as work:
            loan = find_by_id(work.collection(LOANS), loan_id)
            if loan is None:
                raise LoanNotFound(loan_id)
            if loan.is_returned:
                raise LoanAlreadyReturned(loan_id)

            now = self.clock()
            loan.actual_return_date = now.date()
            loan.status = LoanStatus.RETURNED

            late_fee: Optional[Decimal] = None
            days_late = loan.days_late(now)
            if days_late > 0 and self.daily_fee > 0:
                late_fee = self.daily_fee * days_late
                self.fines.create_fine(loan.user_id, late_fee, late_fee_concept(days_late, loan.id),
                                       automatic=True, uow=work)
                loan.fine_generated = True
                logger.warning("Loan #%s returned %d days late; fine of %s", loan.id, days_late, late_fee)

            book = find_by_id(work.collection(BOOKS), loan.book_id)
            if book is not None:
                book.available_copies += 1
                work.save(BOOKS)
            else:
                logger.warning("Loan #%s refers to missing book %s", loan.id, loan.book_id)

            work.save(LOANS)

        logger.info("Loan #%s returned", loan.id)
        return loan, late_fee

    # ------------------------- Queries ------------------------- #
    def list_loans(self) -> List[Loan]:
        return self.store.load_all(LOANS)

    def list_active_loans(self) -> List[Loan]:
        return [l for l in self.list_loans() if l.status == LoanStatus.ACTIVE]

    def list_overdue_loans(self, now: Optional[datetime] = None) -> List[Loan]:
        """Active loans past their expected return date, computed on the fly."""
        now = now or self.clock()
        return [l for l in self.list_loans() if l.is_overdue(now)]

    def loans_for_user(self, user_id: int) -> List[Loan]:
        return [l for l in self.list_loans() if l.user_id == user_id]

    def find_loan(self, loan_id: int) -> Loan:
        loan = find_by_id(self.list_loans(), loan_id)
        if loan is None:
            raise LoanNotFound(loan_id)
        return loan
