from decimal import Decimal
from typing import Any, Dict, Optional

from biblioteca.config import settings
from biblioteca.exceptions import LibraryError
from biblioteca.schemas import AuthorCreate, BookCreate, CategoryCreate, UserCreate
from biblioteca.services import CatalogService, FineService, LoanService
from biblioteca.services.base import Clock
from biblioteca.storage import BOOKS, USERS, CounterStore, RecordStore


class Library:
    """Wires the record store, id counters and services for one data directory."""

    def __init__(self, data_dir: Optional[str] = None, clock: Optional[Clock] = None,
                 loan_days: Optional[int] = None, daily_fee: Optional[Decimal] = None) -> None:
        self.data_dir = data_dir or settings.data_dir
        self.store = RecordStore(self.data_dir)
        self.counters = CounterStore(self.data_dir)

        self.catalog = CatalogService(self.store, self.counters, clock)
        self.fines = FineService(self.store, self.counters, clock)
        self.loans = LoanService(
            self.store,
            self.counters,
            self.fines,
            clock,
            loan_days=settings.loan_days if loan_days is None else loan_days,
            daily_fee=settings.daily_late_fee if daily_fee is None else daily_fee,
        )

    def get_statistics(self) -> Dict[str, Any]:
        books = self.catalog.list_books()
        users = self.catalog.list_users()
        pending = self.fines.list_pending_fines()
        return {
            "total_books": len(books),
            "active_books": sum(1 for b in books if b.active),
            "total_copies": sum(b.total_copies for b in books),
            "available_copies": sum(b.available_copies for b in books),
            "total_users": len(users),
            "active_users": sum(1 for u in users if u.active),
            "active_loans": len(self.loans.list_active_loans()),
            "overdue_loans": len(self.loans.list_overdue_loans()),
            "pending_fines": len(pending),
            "pending_amount": sum((f.amount for f in pending), Decimal("0.00")),
        }

    def seed_demo_data(self) -> Dict[str, int]:
        """Populate an empty data directory with sample authors, categories, books and users."""
        if self.store.load_all(BOOKS) or self.store.load_all(USERS):
            raise LibraryError(f"{self.data_dir} already contains books or users; refusing to seed")

        authors = [
            self.catalog.create_author(AuthorCreate(first_name="Gabriel", last_name="García Márquez",
                                                    nationality="Colombiana")),
            self.catalog.create_author(AuthorCreate(first_name="Isabel", last_name="Allende", nationality="Chilena")),
            self.catalog.create_author(AuthorCreate(first_name="Jorge", last_name="Luis Borges",
                                                    nationality="Argentina")),
        ]
        categories = [
            self.catalog.create_category(CategoryCreate(name="Ficción", description="Novelas y cuentos de ficción")),
            self.catalog.create_category(CategoryCreate(name="Ciencia", description="Libros científicos y técnicos")),
            self.catalog.create_category(CategoryCreate(name="Historia",
                                                        description="Libros de historia y biografías")),
        ]
        fiction = categories[0].id
        books = [
            self.catalog.create_book(BookCreate(title="Cien Años de Soledad", isbn="9780307474728",
                                                author_id=authors[0].id, category_id=fiction,
                                                publication_year=1967, total_copies=5)),
            self.catalog.create_book(BookCreate(title="La Casa de los Espíritus", isbn="9788401242267",
                                                author_id=authors[1].id, category_id=fiction,
                                                publication_year=1982, total_copies=3)),
            self.catalog.create_book(BookCreate(title="Ficciones", isbn="9788432248665",
                                                author_id=authors[2].id, category_id=fiction,
                                                publication_year=1944, total_copies=4)),
        ]
        users = [
            self.catalog.create_user(UserCreate(first_name="Juan", last_name="Pérez", email="juan.perez@email.com",
                                                phone="12345678", address="Calle Principal 123")),
            self.catalog.create_user(UserCreate(first_name="María", last_name="González",
                                                email="maria.gonzalez@email.com", phone="87654321",
                                                address="Avenida Central 456")),
        ]
        return {
            "authors": len(authors),
            "categories": len(categories),
            "books": len(books),
            "users": len(users),
        }
