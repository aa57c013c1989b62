import logging
import sys
from decimal import Decimal
from functools import wraps
from typing import Callable, Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from biblioteca.config import settings
from biblioteca.exceptions import LibraryError
from biblioteca.library import Library
from biblioteca.models import Author, Book, Category, Fine, Loan, User, format_date
from biblioteca.schemas import (
    AuthorCreate,
    AuthorUpdate,
    BookCreate,
    BookUpdate,
    CategoryCreate,
    CategoryUpdate,
    ManualFineRequest,
    UserCreate,
    UserUpdate,
    validate,
)
from biblioteca.ui_helpers import (
    get_output_mode,
    print_detail,
    print_list_result,
    print_stats_result,
    set_output_mode,
)
from biblioteca.validators import ContactValidator, ISBNValidator, NumberValidator, TextValidator

APP_NAME = settings.app_name

console = Console()
logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    level_name = (level or ("DEBUG" if settings.debug else settings.log_level)).upper()
    logging.basicConfig(
        level=level_name,
        filename=log_file or settings.log_file,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level_name)


# Single Library instance per data directory
class LibraryManager:
    _instance: Optional[Library] = None
    _data_dir: Optional[str] = None

    @classmethod
    def use_data_dir(cls, data_dir: Optional[str]) -> None:
        if data_dir != cls._data_dir:
            cls._data_dir = data_dir
            cls._instance = None

    @classmethod
    def get_instance(cls) -> Library:
        """Get or create the Library for the selected data directory."""
        if cls._instance is None:
            cls._instance = Library(data_dir=cls._data_dir)
            logger.debug("Library opened on %s", cls._instance.data_dir)
        return cls._instance


def handle_errors(func: Callable) -> Callable:
    """Report library errors as a one-line message and exit status 1."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LibraryError as e:
            print(f"Error: {e}")
            raise typer.Exit(code=1)
    return wrapper


# ------------------------- Detail renderers ------------------------- #

def show_author(author: Author) -> None:
    print_detail("Author found", author, [
        ("ID", author.id), ("Name", author.full_name), ("Nationality", author.nationality),
    ])


def show_category(category: Category) -> None:
    print_detail("Category found", category, [
        ("ID", category.id), ("Name", category.name), ("Description", category.description),
    ])


def show_book(book: Book) -> None:
    print_detail("Book found", book, [
        ("ID", book.id),
        ("Title", book.title),
        ("ISBN", book.isbn),
        ("Author ID", book.author_id),
        ("Category ID", book.category_id),
        ("Publication year", book.publication_year),
        ("Total copies", book.total_copies),
        ("Available copies", book.available_copies),
        ("Status", "Active" if book.active else "Inactive"),
    ])


def show_user(user: User) -> None:
    print_detail("User found", user, [
        ("ID", user.id),
        ("Name", user.full_name),
        ("Email", user.email),
        ("Phone", user.phone),
        ("Address", user.address),
        ("Status", "Active" if user.active else "Inactive"),
        ("Pending fines", user.pending_fines),
    ])


def show_loan(loan: Loan) -> None:
    print_detail("Loan found", loan, [
        ("ID", loan.id),
        ("User ID", loan.user_id),
        ("Book ID", loan.book_id),
        ("Loan date", format_date(loan.loan_date)),
        ("Expected return", format_date(loan.expected_return_date)),
        ("Actual return", format_date(loan.actual_return_date) or "Not returned"),
        ("Status", loan.status.value),
        ("Fine generated", "Yes" if loan.fine_generated else "No"),
    ])


def show_fine(fine: Fine) -> None:
    print_detail("Fine found", fine, [
        ("ID", fine.id),
        ("User ID", fine.user_id),
        ("Amount", f"${fine.amount:.2f}"),
        ("Concept", fine.concept),
        ("Generated", format_date(fine.generation_date)),
        ("Paid", format_date(fine.payment_date) or "Not paid"),
        ("Status", fine.status.value),
    ])


# --- Typer CLI application ---
app = typer.Typer(help="Library management: books, users, loans and fines.")
books_app = typer.Typer(help="Register, search and deactivate books.")
users_app = typer.Typer(help="Register, update and deactivate users.")
authors_app = typer.Typer(help="Manage authors.")
categories_app = typer.Typer(help="Manage categories.")
loans_app = typer.Typer(help="Lend and return books.")
fines_app = typer.Typer(help="Register and pay fines.")
app.add_typer(books_app, name="books")
app.add_typer(users_app, name="users")
app.add_typer(authors_app, name="authors")
app.add_typer(categories_app, name="categories")
app.add_typer(loans_app, name="loans")
app.add_typer(fines_app, name="fines")


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output format: plain | json | rich (default: plain)",
    ),
    data_dir: Optional[str] = typer.Option(
        None, "--data-dir", "-d", help="Directory holding the JSON data files",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (default from LOG_LEVEL)"),
):
    """Global options (output mode, data directory). Without a command the interactive menu opens."""
    configure_logging(log_level)
    if output:
        set_output_mode(output)
    LibraryManager.use_data_dir(data_dir)
    if ctx.invoked_subcommand is None:
        run_menu()


@app.command("stats")
@handle_errors
def cli_stats():
    """Show library statistics."""
    print_stats_result(LibraryManager.get_instance().get_statistics())


@app.command("seed")
@handle_errors
def cli_seed():
    """Fill an empty data directory with sample records."""
    counts = LibraryManager.get_instance().seed_demo_data()
    print(
        f"Sample data created: {counts['authors']} authors, {counts['categories']} categories, "
        f"{counts['books']} books, {counts['users']} users"
    )


@app.command("menu")
def cli_menu():
    """Open the interactive menu."""
    run_menu()


# ------------------------- Books ------------------------- #

@books_app.command("list")
@handle_errors
def books_list():
    """List every book."""
    print_list_result("📚 Books", LibraryManager.get_instance().catalog.list_books(), "No books registered.")


@books_app.command("show")
@handle_errors
def books_show(book_id: int = typer.Argument(..., min=1)):
    """Show one book."""
    show_book(LibraryManager.get_instance().catalog.get_book(book_id))


@books_app.command("search")
@handle_errors
def books_search(query: str):
    """Search books by title or ISBN."""
    books = LibraryManager.get_instance().catalog.search_books(query)
    print_list_result(f"🔎 Results for '{query}'", books, "No books match the query.")


@books_app.command("add")
@handle_errors
def books_add(
    title: str = typer.Option(..., "--title", prompt=True),
    isbn: str = typer.Option(..., "--isbn", prompt=True),
    author_id: int = typer.Option(..., "--author-id", prompt=True),
    category_id: int = typer.Option(..., "--category-id", prompt=True),
    year: int = typer.Option(..., "--year", prompt="Publication year"),
    copies: int = typer.Option(..., "--copies", prompt="Number of copies"),
):
    """Register a new book."""
    data = validate(BookCreate, title=title, isbn=isbn, author_id=author_id, category_id=category_id,
                    publication_year=year, total_copies=copies)
    book = LibraryManager.get_instance().catalog.create_book(data)
    print(f"Book registered with ID: {book.id}")


@books_app.command("update")
@handle_errors
def books_update(
    book_id: int = typer.Argument(..., min=1),
    title: Optional[str] = typer.Option(None, "--title"),
    isbn: Optional[str] = typer.Option(None, "--isbn"),
    year: Optional[int] = typer.Option(None, "--year"),
    copies: Optional[int] = typer.Option(None, "--copies"),
):
    """Update a book; omitted options keep their current value."""
    changes = validate(BookUpdate, title=title, isbn=isbn, publication_year=year, total_copies=copies)
    book = LibraryManager.get_instance().catalog.update_book(book_id, changes)
    print(f"Book {book.id} updated.")


@books_app.command("deactivate")
@handle_errors
def books_deactivate(book_id: int = typer.Argument(..., min=1)):
    """Deactivate a book (it stays on file)."""
    LibraryManager.get_instance().catalog.deactivate_book(book_id)
    print(f"Book with ID {book_id} deactivated.")


# ------------------------- Users ------------------------- #

@users_app.command("list")
@handle_errors
def users_list():
    """List every user."""
    print_list_result("👤 Users", LibraryManager.get_instance().catalog.list_users(), "No users registered.")


@users_app.command("show")
@handle_errors
def users_show(user_id: int = typer.Argument(..., min=1)):
    """Show one user."""
    show_user(LibraryManager.get_instance().catalog.get_user(user_id))


@users_app.command("add")
@handle_errors
def users_add(
    first_name: str = typer.Option(..., "--first-name", prompt=True),
    last_name: str = typer.Option(..., "--last-name", prompt=True),
    email: str = typer.Option(..., "--email", prompt=True),
    phone: str = typer.Option(..., "--phone", prompt=True),
    address: str = typer.Option(..., "--address", prompt=True),
):
    """Register a new user."""
    data = validate(UserCreate, first_name=first_name, last_name=last_name, email=email, phone=phone,
                    address=address)
    user = LibraryManager.get_instance().catalog.create_user(data)
    print(f"User registered with ID: {user.id}")


@users_app.command("update")
@handle_errors
def users_update(
    user_id: int = typer.Argument(..., min=1),
    first_name: Optional[str] = typer.Option(None, "--first-name"),
    last_name: Optional[str] = typer.Option(None, "--last-name"),
    email: Optional[str] = typer.Option(None, "--email"),
    phone: Optional[str] = typer.Option(None, "--phone"),
    address: Optional[str] = typer.Option(None, "--address"),
):
    """Update a user; omitted options keep their current value."""
    changes = validate(UserUpdate, first_name=first_name, last_name=last_name, email=email, phone=phone,
                       address=address)
    user = LibraryManager.get_instance().catalog.update_user(user_id, changes)
    print(f"User {user.id} updated.")


@users_app.command("deactivate")
@handle_errors
def users_deactivate(user_id: int = typer.Argument(..., min=1)):
    """Deactivate a user (they stay on file)."""
    LibraryManager.get_instance().catalog.deactivate_user(user_id)
    print(f"User with ID {user_id} deactivated.")


# ------------------------- Authors ------------------------- #

@authors_app.command("list")
@handle_errors
def authors_list():
    """List every author."""
    print_list_result("✍️ Authors", LibraryManager.get_instance().catalog.list_authors(), "No authors registered.")


@authors_app.command("show")
@handle_errors
def authors_show(author_id: int = typer.Argument(..., min=1)):
    """Show one author."""
    show_author(LibraryManager.get_instance().catalog.get_author(author_id))


@authors_app.command("add")
@handle_errors
def authors_add(
    first_name: str = typer.Option(..., "--first-name", prompt=True),
    last_name: str = typer.Option(..., "--last-name", prompt=True),
    nationality: str = typer.Option(..., "--nationality", prompt=True),
):
    """Register a new author."""
    data = validate(AuthorCreate, first_name=first_name, last_name=last_name, nationality=nationality)
    author = LibraryManager.get_instance().catalog.create_author(data)
    print(f"Author registered with ID: {author.id}")


@authors_app.command("update")
@handle_errors
def authors_update(
    author_id: int = typer.Argument(..., min=1),
    first_name: Optional[str] = typer.Option(None, "--first-name"),
    last_name: Optional[str] = typer.Option(None, "--last-name"),
    nationality: Optional[str] = typer.Option(None, "--nationality"),
):
    """Update an author; omitted options keep their current value."""
    changes = validate(AuthorUpdate, first_name=first_name, last_name=last_name, nationality=nationality)
    author = LibraryManager.get_instance().catalog.update_author(author_id, changes)
    print(f"Author {author.id} updated.")


@authors_app.command("delete")
@handle_errors
def authors_delete(author_id: int = typer.Argument(..., min=1)):
    """Delete an author."""
    LibraryManager.get_instance().catalog.delete_author(author_id)
    print(f"Author with ID {author_id} deleted.")


# ------------------------- Categories ------------------------- #

@categories_app.command("list")
@handle_errors
def categories_list():
    """List every category."""
    print_list_result("🏷️ Categories", LibraryManager.get_instance().catalog.list_categories(),
                      "No categories registered.")


@categories_app.command("show")
@handle_errors
def categories_show(category_id: int = typer.Argument(..., min=1)):
    """Show one category."""
    show_category(LibraryManager.get_instance().catalog.get_category(category_id))


@categories_app.command("add")
@handle_errors
def categories_add(
    name: str = typer.Option(..., "--name", prompt=True),
    description: str = typer.Option(..., "--description", prompt=True),
):
    """Register a new category."""
    data = validate(CategoryCreate, name=name, description=description)
    category = LibraryManager.get_instance().catalog.create_category(data)
    print(f"Category registered with ID: {category.id}")


@categories_app.command("update")
@handle_errors
def categories_update(
    category_id: int = typer.Argument(..., min=1),
    name: Optional[str] = typer.Option(None, "--name"),
    description: Optional[str] = typer.Option(None, "--description"),
):
    """Update a category; omitted options keep their current value."""
    changes = validate(CategoryUpdate, name=name, description=description)
    category = LibraryManager.get_instance().catalog.update_category(category_id, changes)
    print(f"Category {category.id} updated.")


@categories_app.command("delete")
@handle_errors
def categories_delete(category_id: int = typer.Argument(..., min=1)):
    """Delete a category."""
    LibraryManager.get_instance().catalog.delete_category(category_id)
    print(f"Category with ID {category_id} deleted.")


# ------------------------- Loans ------------------------- #

@loans_app.command("list")
@handle_errors
def loans_list(
    active: bool = typer.Option(False, "--active", help="Only loans not yet returned"),
    overdue: bool = typer.Option(False, "--overdue", help="Only active loans past their due date"),
    user_id: Optional[int] = typer.Option(None, "--user", help="Only loans of this user"),
):
    """List loans."""
    loans_service = LibraryManager.get_instance().loans
    if overdue:
        loans, title = loans_service.list_overdue_loans(), "⏰ Overdue loans"
    elif active:
        loans, title = loans_service.list_active_loans(), "📖 Active loans"
    else:
        loans, title = loans_service.list_loans(), "📖 Loans"
    if user_id is not None:
        loans = [l for l in loans if l.user_id == user_id]
    print_list_result(title, loans, "No loans found.")


@loans_app.command("show")
@handle_errors
def loans_show(loan_id: int = typer.Argument(..., min=1)):
    """Show one loan."""
    show_loan(LibraryManager.get_instance().loans.find_loan(loan_id))


@loans_app.command("create")
@handle_errors
def loans_create(user_id: int = typer.Argument(..., min=1), book_id: int = typer.Argument(..., min=1)):
    """Lend a book to a user."""
    loan = LibraryManager.get_instance().loans.create_loan(user_id, book_id)
    print(f"Loan registered with ID: {loan.id}")
    print(f"Expected return date: {format_date(loan.expected_return_date)}")


@loans_app.command("return")
@handle_errors
def loans_return(loan_id: int = typer.Argument(..., min=1)):
    """Return a lent book; late returns generate a fine."""
    loan, late_fee = LibraryManager.get_instance().loans.return_loan(loan_id)
    if late_fee is not None:
        days = (loan.actual_return_date - loan.expected_return_date).days
        print(f"WARNING: returned {days} days late.")
        print(f"A fine of ${late_fee:.2f} was generated.")
    print("Book returned successfully.")


# ------------------------- Fines ------------------------- #

@fines_app.command("list")
@handle_errors
def fines_list(
    pending: bool = typer.Option(False, "--pending", help="Only unpaid fines"),
    user_id: Optional[int] = typer.Option(None, "--user", help="Only fines of this user"),
):
    """List fines."""
    fines_service = LibraryManager.get_instance().fines
    fines = fines_service.list_pending_fines() if pending else fines_service.list_fines()
    if user_id is not None:
        fines = [f for f in fines if f.user_id == user_id]
    print_list_result("💰 Pending fines" if pending else "💰 Fines", fines, "No fines found.")
    if pending and fines and get_output_mode() == "plain":
        total = sum((f.amount for f in fines), Decimal("0.00"))
        print(f"Pending amount: ${total:.2f}")


@fines_app.command("show")
@handle_errors
def fines_show(fine_id: int = typer.Argument(..., min=1)):
    """Show one fine."""
    show_fine(LibraryManager.get_instance().fines.find_fine(fine_id))


@fines_app.command("create")
@handle_errors
def fines_create(
    user_id: int = typer.Argument(...),
    amount: str = typer.Argument(..., help="Amount between 0.01 and 10000.00"),
    concept: str = typer.Option("", "--concept", "-c", help="Reason for the fine"),
):
    """Register a manual fine."""
    request = validate(ManualFineRequest, user_id=user_id, amount=amount, concept=concept)
    fine = LibraryManager.get_instance().fines.create_fine(request.user_id, request.amount, request.concept,
                                                           automatic=False)
    print(f"Fine registered with ID: {fine.id} (${fine.amount:.2f})")


@fines_app.command("pay")
@handle_errors
def fines_pay(fine_id: int = typer.Argument(..., min=1)):
    """Mark a fine as paid."""
    fine = LibraryManager.get_instance().fines.pay_fine(fine_id)
    print(f"Fine paid. Amount: ${fine.amount:.2f}")


# ------------------------- Interactive menu ------------------------- #

def ask_valid(label: str, check: Callable[[str], bool], error: str) -> str:
    """Prompt until ``check`` accepts the (trimmed) answer."""
    while True:
        answer = Prompt.ask(label, default="", show_default=False).strip()
        if check(answer):
            return answer
        console.print(f"[red]ERROR:[/] {error}")


def ask_text(label: str, min_length: int, max_length: int) -> str:
    return ask_valid(label, lambda t: TextValidator.validate_text(t, min_length, max_length),
                     f"{min_length}-{max_length} characters, letters and spaces only.")


def ask_int(label: str, minimum: int = 1, maximum: int = 999999) -> int:
    raw = ask_valid(label, lambda t: NumberValidator.parse_int(t, minimum, maximum) is not None,
                    f"Enter a whole number between {minimum} and {maximum}.")
    return int(raw)


def ask_decimal(label: str, minimum: Decimal, maximum: Decimal) -> Decimal:
    raw = ask_valid(label, lambda t: NumberValidator.parse_decimal(t, minimum, maximum) is not None,
                    f"Enter an amount between {minimum} and {maximum}.")
    return NumberValidator.parse_decimal(raw, minimum, maximum)


def ask_optional(label: str, current) -> Optional[str]:
    """Blank answer keeps the current value (returns None)."""
    answer = Prompt.ask(f"{label} ({escape(str(current))})", default="", show_default=False).strip()
    return answer or None


def _run_action(action: Callable[[], None]) -> None:
    try:
        action()
    except LibraryError as e:
        console.print(f"[bold red]ERROR:[/] {escape(str(e))}")


def _menu_books(lib: Library) -> None:
    def add():
        data = validate(
            BookCreate,
            title=ask_text("Book title", 2, 100),
            isbn=ask_valid("ISBN", ISBNValidator.is_valid_isbn, "ISBN must contain 10 or 13 digits."),
            author_id=ask_int("Author ID"),
            category_id=ask_int("Category ID"),
            publication_year=ask_int("Publication year", 1500, settings.max_publication_year),
            total_copies=ask_int("Number of copies", 1, 1000),
        )
        book = lib.catalog.create_book(data)
        console.print(f"[green]Book registered with ID: {book.id}[/]")

    def update():
        book = lib.catalog.get_book(ask_int("Book ID to update"))
        console.print(f"Current book: [bold]{escape(book.title)}[/] (Enter keeps the current value)")
        changes = validate(
            BookUpdate,
            title=ask_optional("Title", book.title),
            isbn=ask_optional("ISBN", book.isbn),
            publication_year=ask_optional("Year", book.publication_year),
            total_copies=ask_optional("Number of copies", book.total_copies),
        )
        lib.catalog.update_book(book.id, changes)
        console.print("[green]Book updated.[/]")

    def deactivate():
        book_id = ask_int("Book ID to deactivate")
        lib.catalog.deactivate_book(book_id)
        console.print(f"[green]Book with ID {book_id} deactivated.[/]")

    _submenu("Book management", [
        ("1", "Register new book", add),
        ("2", "List books", lambda: print_list_result("📚 Books", lib.catalog.list_books(), "No books registered.")),
        ("3", "Find book", lambda: show_book(lib.catalog.get_book(ask_int("Book ID")))),
        ("4", "Update book", update),
        ("5", "Deactivate book", deactivate),
    ])


def _menu_users(lib: Library) -> None:
    def add():
        data = validate(
            UserCreate,
            first_name=ask_text("First name", 2, 50),
            last_name=ask_text("Last name", 2, 50),
            email=ask_valid("E-mail", ContactValidator.is_valid_email, "Invalid e-mail. Example: usuario@dominio.com"),
            phone=ask_valid("Phone", ContactValidator.is_valid_phone, "Phone must contain 8 to 15 digits."),
            address=ask_valid("Address", TextValidator.validate_address, "Address must be 5-100 characters."),
        )
        user = lib.catalog.create_user(data)
        console.print(f"[green]User registered with ID: {user.id}[/]")

    def update():
        user = lib.catalog.get_user(ask_int("User ID to update"))
        console.print(f"Current user: [bold]{escape(user.full_name)}[/] (Enter keeps the current value)")
        changes = validate(
            UserUpdate,
            first_name=ask_optional("First name", user.first_name),
            last_name=ask_optional("Last name", user.last_name),
            email=ask_optional("E-mail", user.email),
            phone=ask_optional("Phone", user.phone),
            address=ask_optional("Address", user.address),
        )
        lib.catalog.update_user(user.id, changes)
        console.print("[green]User updated.[/]")

    def deactivate():
        user_id = ask_int("User ID to deactivate")
        lib.catalog.deactivate_user(user_id)
        console.print(f"[green]User with ID {user_id} deactivated.[/]")

    _submenu("User management", [
        ("1", "Register new user", add),
        ("2", "List users", lambda: print_list_result("👤 Users", lib.catalog.list_users(), "No users registered.")),
        ("3", "Find user", lambda: show_user(lib.catalog.get_user(ask_int("User ID")))),
        ("4", "Update user", update),
        ("5", "Deactivate user", deactivate),
    ])


def _menu_loans(lib: Library) -> None:
    def create():
        loan = lib.loans.create_loan(ask_int("User ID"), ask_int("Book ID"))
        console.print(Panel.fit(
            f"[green]Loan registered with ID:[/] [bold]{loan.id}[/]\n"
            f"Expected return date: {format_date(loan.expected_return_date)}",
            title="✅ Loan", border_style="green",
        ))

    def give_back():
        loan, late_fee = lib.loans.return_loan(ask_int("Loan ID"))
        if late_fee is not None:
            console.print(f"[bold yellow]WARNING:[/] late return. A fine of ${late_fee:.2f} was generated.")
        console.print(f"[green]Book from loan #{loan.id} returned.[/]")

    _submenu("Loan management", [
        ("1", "Register new loan", create),
        ("2", "Return book", give_back),
        ("3", "List all loans", lambda: print_list_result("📖 Loans", lib.loans.list_loans(), "No loans registered.")),
        ("4", "List active loans",
         lambda: print_list_result("📖 Active loans", lib.loans.list_active_loans(), "No active loans.")),
        ("5", "List overdue loans",
         lambda: print_list_result("⏰ Overdue loans", lib.loans.list_overdue_loans(), "No overdue loans.")),
        ("6", "Find loan", lambda: show_loan(lib.loans.find_loan(ask_int("Loan ID")))),
    ])


def _menu_fines(lib: Library) -> None:
    def create():
        user = lib.catalog.get_user(ask_int("User ID"))
        request = validate(
            ManualFineRequest,
            user_id=user.id,
            amount=ask_decimal("Fine amount $", settings.manual_fine_min, settings.manual_fine_max),
            concept=Prompt.ask("Concept", default="", show_default=False).strip(),
        )
        fine = lib.fines.create_fine(request.user_id, request.amount, request.concept, automatic=False)
        console.print(f"[green]Fine registered with ID: {fine.id}[/]")

    def pay():
        fine = lib.fines.pay_fine(ask_int("Fine ID"))
        console.print(f"[green]Fine paid. Amount: ${fine.amount:.2f}[/]")

    def pending():
        fines = lib.fines.list_pending_fines()
        print_list_result("💰 Pending fines", fines, "No pending fines.")
        if fines:
            console.print(f"Pending amount: [bold]${lib.fines.pending_total():.2f}[/]")

    _submenu("Fine management", [
        ("1", "Register new fine", create),
        ("2", "Pay fine", pay),
        ("3", "List all fines", lambda: print_list_result("💰 Fines", lib.fines.list_fines(), "No fines registered.")),
        ("4", "List pending fines", pending),
        ("5", "Find fine", lambda: show_fine(lib.fines.find_fine(ask_int("Fine ID")))),
    ])


def _menu_categories(lib: Library) -> None:
    def add():
        data = validate(CategoryCreate, name=ask_text("Category name", 3, 50),
                        description=ask_text("Description", 5, 200))
        category = lib.catalog.create_category(data)
        console.print(f"[green]Category registered with ID: {category.id}[/]")

    def update():
        category = lib.catalog.get_category(ask_int("Category ID to update"))
        changes = validate(CategoryUpdate, name=ask_optional("Name", category.name),
                           description=ask_optional("Description", category.description))
        lib.catalog.update_category(category.id, changes)
        console.print("[green]Category updated.[/]")

    def delete():
        category_id = ask_int("Category ID to delete")
        if Confirm.ask("Delete this category?", default=False):
            lib.catalog.delete_category(category_id)
            console.print(f"[green]Category with ID {category_id} deleted.[/]")

    _submenu("Category management", [
        ("1", "Register new category", add),
        ("2", "List categories", lambda: print_list_result("🏷️ Categories", lib.catalog.list_categories(),
                                                           "No categories registered.")),
        ("3", "Find category", lambda: show_category(lib.catalog.get_category(ask_int("Category ID")))),
        ("4", "Update category", update),
        ("5", "Delete category", delete),
    ])


def _menu_authors(lib: Library) -> None:
    def add():
        data = validate(AuthorCreate, first_name=ask_text("Author first name", 2, 50),
                        last_name=ask_text("Author last name", 2, 50),
                        nationality=ask_text("Nationality", 2, 30))
        author = lib.catalog.create_author(data)
        console.print(f"[green]Author registered with ID: {author.id}[/]")

    def update():
        author = lib.catalog.get_author(ask_int("Author ID to update"))
        changes = validate(AuthorUpdate, first_name=ask_optional("First name", author.first_name),
                           last_name=ask_optional("Last name", author.last_name),
                           nationality=ask_optional("Nationality", author.nationality))
        lib.catalog.update_author(author.id, changes)
        console.print("[green]Author updated.[/]")

    def delete():
        author_id = ask_int("Author ID to delete")
        if Confirm.ask("Delete this author?", default=False):
            lib.catalog.delete_author(author_id)
            console.print(f"[green]Author with ID {author_id} deleted.[/]")

    _submenu("Author management", [
        ("1", "Register new author", add),
        ("2", "List authors", lambda: print_list_result("✍️ Authors", lib.catalog.list_authors(),
                                                        "No authors registered.")),
        ("3", "Find author", lambda: show_author(lib.catalog.get_author(ask_int("Author ID")))),
        ("4", "Update author", update),
        ("5", "Delete author", delete),
    ])


def _render_menu(title: str, items) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_column(justify="right", style="bold cyan", width=4)
    table.add_column(justify="left", style="white")
    for key, label in items:
        table.add_row(f"[reverse]{key}[/]", label)
    console.print(Panel(table, title=title, border_style="cyan", box=box.HEAVY, padding=(1, 2)))


def _submenu(title: str, options) -> None:
    actions = {key: action for key, _label, action in options}
    while True:
        _render_menu(title, [(key, label) for key, label, _a in options] + [("0", "Back to main menu")])
        choice = Prompt.ask("Select an option", choices=list(actions) + ["0"], default="0")
        if choice == "0":
            return
        _run_action(actions[choice])
        console.print()


def run_menu() -> None:
    """Interactive menu for the library console."""
    if get_output_mode() == "plain":
        set_output_mode("rich")
    lib = LibraryManager.get_instance()
    sections = {
        "1": ("📚 Book management", _menu_books),
        "2": ("👤 User management", _menu_users),
        "3": ("📖 Loan management", _menu_loans),
        "4": ("💰 Fine management", _menu_fines),
        "5": ("🏷️ Category management", _menu_categories),
        "6": ("✍️ Author management", _menu_authors),
        "7": ("📊 Statistics", lambda l: print_stats_result(l.get_statistics())),
    }

    while True:
        console.clear()
        _render_menu(f"{APP_NAME} v{settings.app_version}  [dim](Storage: {escape(str(lib.data_dir))})[/]",
                     [(key, label) for key, (label, _f) in sections.items()] + [("0", "🚪 Exit")])
        choice = Prompt.ask("Select an option", choices=list(sections) + ["0"], default="0")
        if choice == "0":
            console.print("[green]Thank you for using the system. Goodbye![/]")
            break
        _run_action(lambda: sections[choice][1](lib))
        console.print()


def main() -> None:
    app()


if __name__ == "__main__":
    if len(sys.argv) > 1:
        app()
    else:
        configure_logging()
        run_menu()
