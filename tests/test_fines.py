from datetime import date
from decimal import Decimal

import pytest

from biblioteca.exceptions import FineAlreadyPaid, FineNotFound, UserNotFound, ValidationFailed
from biblioteca.models import FineStatus
from biblioteca.schemas import ManualFineRequest, validate
from biblioteca.storage import USERS


def test_manual_fine_increments_pending_count(lib, stocked):
    fine = lib.fines.create_fine(stocked["user"].id, Decimal("12.5"), "Libro dañado")

    assert fine.id == 1
    assert fine.amount == Decimal("12.50")
    assert fine.status == FineStatus.PENDING
    assert fine.generation_date == date(2024, 3, 1)
    assert fine.payment_date is None
    assert lib.catalog.get_user(stocked["user"].id).pending_fines == 1


def test_manual_fine_requires_existing_user(lib):
    with pytest.raises(UserNotFound):
        lib.fines.create_fine(5, Decimal("1.00"), "Pérdida")
    assert lib.fines.list_fines() == []


def test_non_positive_amount_rejected(lib, stocked):
    with pytest.raises(ValidationFailed):
        lib.fines.create_fine(stocked["user"].id, Decimal("0"), "Nada")


def test_automatic_fine_has_no_upper_bound(lib, stocked):
    fine = lib.fines.create_fine(stocked["user"].id, Decimal("15000.00"), "Retraso", automatic=True)
    assert fine.amount == Decimal("15000.00")


def test_pay_fine(lib, stocked, clock):
    fine = lib.fines.create_fine(stocked["user"].id, Decimal("3.00"), "Retraso")
    clock.advance(days=2)

    paid = lib.fines.pay_fine(fine.id)

    assert paid.status == FineStatus.PAID
    assert paid.payment_date == date(2024, 3, 3)
    assert lib.fines.find_fine(fine.id).is_paid
    assert lib.catalog.get_user(stocked["user"].id).pending_fines == 0


def test_pay_twice_is_rejected(lib, stocked):
    fine = lib.fines.create_fine(stocked["user"].id, Decimal("3.00"), "Retraso")
    lib.fines.pay_fine(fine.id)

    with pytest.raises(FineAlreadyPaid):
        lib.fines.pay_fine(fine.id)
    assert lib.catalog.get_user(stocked["user"].id).pending_fines == 0


def test_pay_unknown_fine(lib):
    with pytest.raises(FineNotFound):
        lib.fines.pay_fine(3)


def test_pending_count_never_goes_negative(lib, stocked):
    fine = lib.fines.create_fine(stocked["user"].id, Decimal("3.00"), "Retraso")
    users = lib.store.load_all(USERS)
    users[0].pending_fines = 0
    lib.store.save_all(USERS, users)

    lib.fines.pay_fine(fine.id)
    assert lib.catalog.get_user(stocked["user"].id).pending_fines == 0


def test_pay_fine_of_deleted_user(lib, stocked):
    fine = lib.fines.create_fine(stocked["user"].id, Decimal("3.00"), "Retraso")
    lib.store.save_all(USERS, [])

    assert lib.fines.pay_fine(fine.id).is_paid


def test_queries_and_pending_total(lib, stocked):
    a = lib.fines.create_fine(stocked["user"].id, Decimal("1.25"), "A")
    lib.fines.create_fine(stocked["user"].id, Decimal("2.00"), "B")
    lib.fines.pay_fine(a.id)

    assert [f.id for f in lib.fines.list_fines()] == [1, 2]
    assert [f.id for f in lib.fines.list_pending_fines()] == [2]
    assert [f.id for f in lib.fines.fines_for_user(stocked["user"].id)] == [1, 2]
    assert lib.fines.pending_total() == Decimal("2.00")


class TestManualFineRequest:

    def test_amount_is_rounded(self):
        request = validate(ManualFineRequest, user_id=1, amount="10.005", concept="Daño")
        assert request.amount == Decimal("10.00")

    @pytest.mark.parametrize("amount", ["0.00", "-1", "10000.01"])
    def test_amount_out_of_bounds(self, amount):
        with pytest.raises(ValidationFailed) as excinfo:
            validate(ManualFineRequest, user_id=1, amount=amount)
        assert "amount" in excinfo.value.errors

    def test_bounds_are_inclusive(self):
        assert validate(ManualFineRequest, user_id=1, amount="0.01").amount == Decimal("0.01")
        assert validate(ManualFineRequest, user_id=1, amount="10000.00").amount == Decimal("10000.00")

    def test_amount_not_a_number(self):
        with pytest.raises(ValidationFailed):
            validate(ManualFineRequest, user_id=1, amount="abc")
