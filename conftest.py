from datetime import datetime, timedelta

import pytest

from biblioteca.library import Library
from biblioteca.schemas import AuthorCreate, BookCreate, CategoryCreate, UserCreate


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now += timedelta(days=days, hours=hours)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 10, 30))


@pytest.fixture
def lib(tmp_path, clock):
    # Each test gets its own data directory
    return Library(data_dir=str(tmp_path / "Data"), clock=clock)


@pytest.fixture
def stocked(lib):
    """One author, one category, a book with 5 copies and an active user."""
    author = lib.catalog.create_author(AuthorCreate(first_name="Isabel", last_name="Allende", nationality="Chilena"))
    category = lib.catalog.create_category(CategoryCreate(name="Ficción", description="Novelas y cuentos"))
    book = lib.catalog.create_book(BookCreate(title="La Casa de los Espíritus", isbn="9788401242267",
                                              author_id=author.id, category_id=category.id,
                                              publication_year=1982, total_copies=5))
    user = lib.catalog.create_user(UserCreate(first_name="Juan", last_name="Pérez", email="juan.perez@email.com",
                                              phone="12345678", address="Calle Principal 123"))
    return {"author": author, "category": category, "book": book, "user": user}
