"""Fine engine: creation, payment and the per-user pending-fine counter."""

import logging
from decimal import Decimal
from typing import List, Optional

from biblioteca.exceptions import FineAlreadyPaid, FineNotFound, UserNotFound, ValidationFailed
from biblioteca.models import Fine, FineStatus, to_amount
from biblioteca.services.base import Service
from biblioteca.storage import FINES, USERS, UnitOfWork, find_by_id

logger = logging.getLogger(__name__)

FINE_COUNTER = "multas"


class FineService(Service):

    def create_fine(self, user_id: int, amount, concept: str, automatic: bool = False,
                    uow: Optional[UnitOfWork] = None) -> Fine:
        """Register a pending fine and bump the user's pending-fine count.

        Manual fines require an existing user; their amount bounds are
        enforced before this call (see ``ManualFineRequest``). Automatic
        fines have no upper bound and are recorded even when the user record
        has gone missing.
        """
        amount = to_amount(amount)
        if amount <= 0:
            raise ValidationFailed(f"Fine amount must be positive, got {amount}")

        with self.unit(uow) as work:
            users = work.collection(USERS)
            if not automatic and find_by_id(users, user_id) is None:
                raise UserNotFound(user_id)

            fine = Fine(
                id=self.counters.next_id(FINE_COUNTER),
                user_id=user_id,
                amount=amount,
                concept=concept,
                generation_date=self.clock().date(),
                payment_date=None,
                status=FineStatus.PENDING,
            )
            work.collection(FINES).append(fine)
            work.save(FINES)

            user = find_by_id(users, user_id)
            if user is not None:
                user.pending_fines += 1
                work.save(USERS)

        logger.info("Fine #%s of %s created for user %s (%s)", fine.id, fine.amount, user_id,
                    "automatic" if automatic else "manual")
        return fine

    def pay_fine(self, fine_id: int) -> Fine:
        with self.unit() as work:
            fine = find_by_id(work.collection(FINES), fine_id)
            if fine is None:
                raise FineNotFound(fine_id)
            if fine.is_paid:
                raise FineAlreadyPaid(fine_id)

            fine.payment_date = self.clock().date()
            fine.status = FineStatus.PAID
            work.save(FINES)

            user = find_by_id(work.collection(USERS), fine.user_id)
            if user is not None:
                user.pending_fines = max(0, user.pending_fines - 1)
                work.save(USERS)

        logger.info("Fine #%s paid (%s)", fine.id, fine.amount)
        return fine

    # ------------------------- Queries ------------------------- #
    def list_fines(self) -> List[Fine]:
        return self.store.load_all(FINES)

    def list_pending_fines(self) -> List[Fine]:
        return [f for f in self.list_fines() if f.status == FineStatus.PENDING]

    def fines_for_user(self, user_id: int) -> List[Fine]:
        return [f for f in self.list_fines() if f.user_id == user_id]

    def find_fine(self, fine_id: int) -> Fine:
        fine = find_by_id(self.list_fines(), fine_id)
        if fine is None:
            raise FineNotFound(fine_id)
        return fine

    def pending_total(self) -> Decimal:
        return sum((f.amount for f in self.list_pending_fines()), Decimal("0.00"))
