"""Record management for authors, categories, books and users.

Books and users are only ever deactivated; authors and categories are
removed from their files outright.
"""

import logging
from typing import List

from biblioteca.exceptions import AuthorNotFound, BookNotFound, CategoryNotFound, UserNotFound, ValidationFailed
from biblioteca.models import Author, Book, Category, User
from biblioteca.schemas import (
    AuthorCreate,
    AuthorUpdate,
    BookCreate,
    BookUpdate,
    CategoryCreate,
    CategoryUpdate,
    UserCreate,
    UserUpdate,
)
from biblioteca.services.base import Service
from biblioteca.storage import AUTHORS, BOOKS, CATEGORIES, USERS, delete_by_id, find_by_id

logger = logging.getLogger(__name__)

AUTHOR_COUNTER = "autores"
CATEGORY_COUNTER = "categorias"
BOOK_COUNTER = "libros"
USER_COUNTER = "usuarios"


def _apply(record, changes) -> None:
    for field, value in changes.model_dump(exclude_none=True).items():
        setattr(record, field, value)


class CatalogService(Service):

    # ------------------------- Authors ------------------------- #
    def create_author(self, data: AuthorCreate) -> Author:
        with self.unit() as work:
            author = Author(id=self.counters.next_id(AUTHOR_COUNTER), **data.model_dump())
            work.collection(AUTHORS).append(author)
            work.save(AUTHORS)
        logger.info("Author #%s registered", author.id)
        return author

    def list_authors(self) -> List[Author]:
        return self.store.load_all(AUTHORS)

    def get_author(self, author_id: int) -> Author:
        author = find_by_id(self.list_authors(), author_id)
        if author is None:
            raise AuthorNotFound(author_id)
        return author

    def update_author(self, author_id: int, changes: AuthorUpdate) -> Author:
        with self.unit() as work:
            author = find_by_id(work.collection(AUTHORS), author_id)
            if author is None:
                raise AuthorNotFound(author_id)
            _apply(author, changes)
            work.save(AUTHORS)
        return author

    def delete_author(self, author_id: int) -> None:
        with self.unit() as work:
            if not delete_by_id(work.collection(AUTHORS), author_id):
                raise AuthorNotFound(author_id)
            work.save(AUTHORS)
        logger.info("Author #%s deleted", author_id)

    # ------------------------- Categories ------------------------- #
    def create_category(self, data: CategoryCreate) -> Category:
        with self.unit() as work:
            category = Category(id=self.counters.next_id(CATEGORY_COUNTER), **data.model_dump())
            work.collection(CATEGORIES).append(category)
            work.save(CATEGORIES)
        logger.info("Category #%s registered", category.id)
        return category

    def list_categories(self) -> List[Category]:
        return self.store.load_all(CATEGORIES)

    def get_category(self, category_id: int) -> Category:
        category = find_by_id(self.list_categories(), category_id)
        if category is None:
            raise CategoryNotFound(category_id)
        return category

    def update_category(self, category_id: int, changes: CategoryUpdate) -> Category:
        with self.unit() as work:
            category = find_by_id(work.collection(CATEGORIES), category_id)
            if category is None:
                raise CategoryNotFound(category_id)
            _apply(category, changes)
            work.save(CATEGORIES)
        return category

    def delete_category(self, category_id: int) -> None:
        with self.unit() as work:
            if not delete_by_id(work.collection(CATEGORIES), category_id):
                raise CategoryNotFound(category_id)
            work.save(CATEGORIES)
        logger.info("Category #%s deleted", category_id)

    # ------------------------- Books ------------------------- #
    def create_book(self, data: BookCreate) -> Book:
        with self.unit() as work:
            if find_by_id(work.collection(AUTHORS), data.author_id) is None:
                raise AuthorNotFound(data.author_id)
            if find_by_id(work.collection(CATEGORIES), data.category_id) is None:
                raise CategoryNotFound(data.category_id)
            book = Book(id=self.counters.next_id(BOOK_COUNTER), active=True, **data.model_dump())
            work.collection(BOOKS).append(book)
            work.save(BOOKS)
        logger.info("Book #%s registered with %d copies", book.id, book.total_copies)
        return book

    def list_books(self) -> List[Book]:
        return self.store.load_all(BOOKS)

    def get_book(self, book_id: int) -> Book:
        book = find_by_id(self.list_books(), book_id)
        if book is None:
            raise BookNotFound(book_id)
        return book

    def search_books(self, query: str) -> List[Book]:
        """Books whose title or ISBN contains ``query`` (case-insensitive)."""
        q = query.strip().lower()
        return [b for b in self.list_books() if q in b.title.lower() or q in b.isbn.lower()]

    def update_book(self, book_id: int, changes: BookUpdate) -> Book:
        """Partial update; a new copy total shifts the available count by the same amount."""
        with self.unit() as work:
            book = find_by_id(work.collection(BOOKS), book_id)
            if book is None:
                raise BookNotFound(book_id)
            if changes.total_copies is not None:
                difference = changes.total_copies - book.total_copies
                if book.available_copies + difference < 0:
                    on_loan = book.total_copies - book.available_copies
                    raise ValidationFailed(
                        f"Book {book_id} has {on_loan} copies on loan; total cannot drop to {changes.total_copies}"
                    )
                book.available_copies += difference
            _apply(book, changes)
            work.save(BOOKS)
        return book

    def deactivate_book(self, book_id: int) -> Book:
        with self.unit() as work:
            book = find_by_id(work.collection(BOOKS), book_id)
            if book is None:
                raise BookNotFound(book_id)
            book.active = False
            work.save(BOOKS)
        logger.info("Book #%s deactivated", book_id)
        return book

    # ------------------------- Users ------------------------- #
    def create_user(self, data: UserCreate) -> User:
        with self.unit() as work:
            user = User(id=self.counters.next_id(USER_COUNTER), active=True, pending_fines=0, **data.model_dump())
            work.collection(USERS).append(user)
            work.save(USERS)
        logger.info("User #%s registered", user.id)
        return user

    def list_users(self) -> List[User]:
        return self.store.load_all(USERS)

    def get_user(self, user_id: int) -> User:
        user = find_by_id(self.list_users(), user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    def update_user(self, user_id: int, changes: UserUpdate) -> User:
        with self.unit() as work:
            user = find_by_id(work.collection(USERS), user_id)
            if user is None:
                raise UserNotFound(user_id)
            _apply(user, changes)
            work.save(USERS)
        return user

    def deactivate_user(self, user_id: int) -> User:
        with self.unit() as work:
            user = find_by_id(work.collection(USERS), user_id)
            if user is None:
                raise UserNotFound(user_id)
            user.active = False
            work.save(USERS)
        logger.info("User #%s deactivated", user_id)
        return user
