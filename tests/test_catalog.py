import pytest

from biblioteca.exceptions import (
    AuthorNotFound,
    BookNotFound,
    CategoryNotFound,
    UserNotFound,
    ValidationFailed,
)
from biblioteca.schemas import (
    AuthorUpdate,
    BookCreate,
    BookUpdate,
    CategoryUpdate,
    UserUpdate,
    validate,
)


def test_authors_crud(lib, stocked):
    author = stocked["author"]
    assert lib.catalog.get_author(author.id).full_name == "Isabel Allende"

    lib.catalog.update_author(author.id, AuthorUpdate(nationality="Peruana"))
    updated = lib.catalog.get_author(author.id)
    assert updated.nationality == "Peruana"
    assert updated.first_name == "Isabel"

    lib.catalog.delete_author(author.id)
    assert lib.catalog.list_authors() == []
    with pytest.raises(AuthorNotFound):
        lib.catalog.delete_author(author.id)


def test_categories_crud(lib, stocked):
    category = stocked["category"]
    lib.catalog.update_category(category.id, CategoryUpdate(description="Solo novelas"))
    assert lib.catalog.get_category(category.id).description == "Solo novelas"

    lib.catalog.delete_category(category.id)
    with pytest.raises(CategoryNotFound):
        lib.catalog.get_category(category.id)


def test_book_requires_existing_author_and_category(lib, stocked):
    data = dict(title="Ficciones", isbn="9788432248665", publication_year=1944, total_copies=2)
    with pytest.raises(AuthorNotFound):
        lib.catalog.create_book(BookCreate(author_id=9, category_id=stocked["category"].id, **data))
    with pytest.raises(CategoryNotFound):
        lib.catalog.create_book(BookCreate(author_id=stocked["author"].id, category_id=9, **data))
    assert len(lib.catalog.list_books()) == 1


def test_new_book_is_active_with_all_copies(stocked):
    book = stocked["book"]
    assert book.active is True
    assert book.available_copies == book.total_copies == 5


def test_search_books_by_title_or_isbn(lib, stocked):
    assert [b.id for b in lib.catalog.search_books("espíritus")] == [stocked["book"].id]
    assert [b.id for b in lib.catalog.search_books("01242267")] == [stocked["book"].id]
    assert lib.catalog.search_books("Borges") == []


def test_update_copies_shifts_available(lib, stocked):
    book = stocked["book"]
    lib.loans.create_loan(stocked["user"].id, book.id)
    lib.loans.create_loan(stocked["user"].id, book.id)

    updated = lib.catalog.update_book(book.id, BookUpdate(total_copies=8))
    assert (updated.total_copies, updated.available_copies) == (8, 6)

    updated = lib.catalog.update_book(book.id, BookUpdate(total_copies=2))
    assert (updated.total_copies, updated.available_copies) == (2, 0)


def test_update_copies_below_loaned_rejected(lib, stocked):
    book = stocked["book"]
    for _ in range(3):
        lib.loans.create_loan(stocked["user"].id, book.id)

    with pytest.raises(ValidationFailed):
        lib.catalog.update_book(book.id, BookUpdate(total_copies=2))
    stored = lib.catalog.get_book(book.id)
    assert (stored.total_copies, stored.available_copies) == (5, 2)


def test_update_book_keeps_omitted_fields(lib, stocked):
    book = stocked["book"]
    lib.catalog.update_book(book.id, validate(BookUpdate, title="La casa 2", isbn=None))
    stored = lib.catalog.get_book(book.id)
    assert stored.title == "La casa 2"
    assert stored.isbn == "9788401242267"


def test_deactivate_book_keeps_record(lib, stocked):
    lib.catalog.deactivate_book(stocked["book"].id)
    books = lib.catalog.list_books()
    assert len(books) == 1
    assert books[0].active is False

    with pytest.raises(BookNotFound):
        lib.catalog.deactivate_book(99)


def test_users_update_and_deactivate(lib, stocked):
    user = stocked["user"]
    lib.catalog.update_user(user.id, UserUpdate(phone="555123456"))
    assert lib.catalog.get_user(user.id).phone == "555123456"

    lib.catalog.deactivate_user(user.id)
    assert lib.catalog.get_user(user.id).active is False

    with pytest.raises(UserNotFound):
        lib.catalog.get_user(99)


def test_ids_are_per_entity(lib, stocked):
    assert stocked["author"].id == stocked["category"].id == stocked["book"].id == stocked["user"].id == 1
