import json
from datetime import date
from decimal import Decimal

import pytest

from biblioteca.exceptions import StorageError
from biblioteca.models import Fine, FineStatus, Loan, LoanStatus, User
from biblioteca.storage import (
    FINES,
    LOANS,
    USERS,
    CounterStore,
    RecordStore,
    delete_by_id,
    find_by_id,
)


@pytest.fixture
def store(tmp_path):
    return RecordStore(str(tmp_path))


def test_missing_collection_is_empty(store):
    assert store.load_all(USERS) == []


def test_saved_files_use_original_keys(store, tmp_path):
    user = User(id=1, first_name="María", last_name="González", email="maria@email.com",
                phone="87654321", address="Avenida Central 456")
    store.save_all(USERS, [user])

    raw = (tmp_path / "usuarios.json").read_text(encoding="utf-8")
    assert "María" in raw  # written unescaped
    data = json.loads(raw)
    assert data == [{
        "Id": 1,
        "Nombre": "María",
        "Apellido": "González",
        "Email": "maria@email.com",
        "Telefono": "87654321",
        "Direccion": "Avenida Central 456",
        "Activo": True,
        "MultasPendientes": 0,
    }]

    loaded = store.load_all(USERS)
    assert loaded[0].full_name == "María González"


def test_loan_dates_are_day_month_year(store, tmp_path):
    loan = Loan(id=3, user_id=1, book_id=2, loan_date=date(2024, 3, 1),
                expected_return_date=date(2024, 3, 15))
    store.save_all(LOANS, [loan])

    data = json.loads((tmp_path / "prestamos.json").read_text(encoding="utf-8"))[0]
    assert data["FechaPrestamo"] == "01/03/2024"
    assert data["FechaDevolucionEsperada"] == "15/03/2024"
    assert data["FechaDevolucionReal"] is None
    assert data["Estado"] == "activo"

    loaded = store.load_all(LOANS)[0]
    assert loaded.expected_return_date == date(2024, 3, 15)
    assert loaded.status == LoanStatus.ACTIVE


def test_fine_amount_stored_as_number(store, tmp_path):
    fine = Fine(id=1, user_id=1, amount=Decimal("3.50"), concept="Retraso", generation_date=date(2024, 3, 18))
    store.save_all(FINES, [fine])

    data = json.loads((tmp_path / "multas.json").read_text(encoding="utf-8"))[0]
    assert data["Monto"] == 3.5
    assert data["Estado"] == "pendiente"

    loaded = store.load_all(FINES)[0]
    assert loaded.amount == Decimal("3.50")
    assert loaded.status == FineStatus.PENDING


def test_corrupt_file_raises(store, tmp_path):
    (tmp_path / "usuarios.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        store.load_all(USERS)


def test_non_list_file_raises(store, tmp_path):
    (tmp_path / "multas.json").write_text('{"Id": 1}', encoding="utf-8")
    with pytest.raises(StorageError):
        store.load_all(FINES)


def test_malformed_record_raises(store, tmp_path):
    (tmp_path / "prestamos.json").write_text('[{"Id": 1, "IdUsuario": 1}]', encoding="utf-8")
    with pytest.raises(StorageError):
        store.load_all(LOANS)


def test_counters_start_at_one_and_persist(tmp_path):
    counters = CounterStore(str(tmp_path))
    assert counters.current("libros") == 1
    assert counters.next_id("libros") == 1
    assert counters.next_id("libros") == 2

    assert json.loads((tmp_path / "contador_libros.json").read_text()) == {"contador": 3}
    assert CounterStore(str(tmp_path)).next_id("libros") == 3
    # counters are independent
    assert counters.next_id("usuarios") == 1


def test_malformed_counter_raises(tmp_path):
    (tmp_path / "contador_multas.json").write_text('{"otro": 1}', encoding="utf-8")
    with pytest.raises(StorageError):
        CounterStore(str(tmp_path)).next_id("multas")


def test_find_and_delete_by_id():
    users = [User(id=i, first_name="Ana", last_name="Ruiz", email="a@b.com", phone="12345678",
                  address="Calle Uno 1") for i in (1, 2, 3)]
    assert find_by_id(users, 2) is users[1]
    assert find_by_id(users, 9) is None

    assert delete_by_id(users, 2) is True
    assert [u.id for u in users] == [1, 3]
    assert delete_by_id(users, 2) is False


def test_unit_of_work_shares_loaded_lists(store):
    store.save_all(USERS, [User(id=1, first_name="Ana", last_name="Ruiz", email="a@b.com",
                                phone="12345678", address="Calle Uno 1")])
    with store.unit_of_work() as work:
        users = work.collection(USERS)
        assert work.collection(USERS) is users
        users[0].pending_fines = 2
        work.save(USERS)

    assert store.load_all(USERS)[0].pending_fines == 2
