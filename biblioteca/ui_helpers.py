import os
import json
from typing import Any, Callable, Dict, List, Sequence, Tuple, Union
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from biblioteca.models import Author, Book, Category, Fine, Loan, User, format_date

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "BIBLIOTECA_OUTPUT"

_console = Console()

Getter = Union[str, Callable[[Any], Any]]
Column = Tuple[str, Getter, int]


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _money(value) -> str:
    return f"${value:.2f}"


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


AUTHOR_COLUMNS: List[Column] = [
    ("ID", "id", 5),
    ("Name", lambda a: a.full_name, 30),
    ("Nationality", "nationality", 20),
]

CATEGORY_COLUMNS: List[Column] = [
    ("ID", "id", 5),
    ("Name", "name", 20),
    ("Description", "description", 40),
]

BOOK_COLUMNS: List[Column] = [
    ("ID", "id", 5),
    ("Title", "title", 30),
    ("ISBN", "isbn", 15),
    ("Year", "publication_year", 6),
    ("Available", lambda b: f"{b.available_copies}/{b.total_copies}", 11),
    ("Active", lambda b: _yes_no(b.active), 6),
]

USER_COLUMNS: List[Column] = [
    ("ID", "id", 5),
    ("Name", lambda u: u.full_name, 25),
    ("Email", "email", 30),
    ("Phone", "phone", 15),
    ("Fines", "pending_fines", 5),
    ("Active", lambda u: _yes_no(u.active), 6),
]

LOAN_COLUMNS: List[Column] = [
    ("ID", "id", 5),
    ("User", "user_id", 6),
    ("Book", "book_id", 6),
    ("Loaned", lambda l: format_date(l.loan_date), 11),
    ("Due", lambda l: format_date(l.expected_return_date), 11),
    ("Returned", lambda l: format_date(l.actual_return_date) or "-", 11),
    ("Status", lambda l: l.status.value, 9),
]

FINE_COLUMNS: List[Column] = [
    ("ID", "id", 5),
    ("User", "user_id", 6),
    ("Amount", lambda f: _money(f.amount), 10),
    ("Concept", "concept", 30),
    ("Generated", lambda f: format_date(f.generation_date), 11),
    ("Status", lambda f: f.status.value, 10),
]

COLUMNS_BY_TYPE: Dict[type, List[Column]] = {
    Author: AUTHOR_COLUMNS,
    Category: CATEGORY_COLUMNS,
    Book: BOOK_COLUMNS,
    User: USER_COLUMNS,
    Loan: LOAN_COLUMNS,
    Fine: FINE_COLUMNS,
}


def _cell(record: Any, getter: Getter) -> str:
    value = getter(record) if callable(getter) else getattr(record, getter, "")
    return "" if value is None else str(value)


def print_records(title: str, records: Sequence[Any], columns: List[Column], empty_message: str) -> None:
    """Print records according to the current output mode.
    - plain: fixed-width columns followed by a total line
    - json: JSON array of the records as stored on disk
    - rich: Rich table
    """
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([r.to_dict() for r in records], ensure_ascii=False))
        return

    if not records:
        print(empty_message)
        return

    if mode == "rich":
        table = Table(title=title, show_lines=False, header_style="bold cyan")
        for header, _getter, _width in columns:
            table.add_column(header, style="magenta" if header == "ID" else "white", no_wrap=header == "ID")
        for r in records:
            table.add_row(*(escape(_cell(r, getter)) for _header, getter, _width in columns))
        _console.print(table)
        _console.print(f"[dim]Total: {len(records)}[/]")
    else:
        header = " ".join(f"{h:<{w}}" for h, _g, w in columns)
        print(header)
        print("-" * len(header))
        for r in records:
            print(" ".join(f"{_truncate(_cell(r, g), w):<{w}}" for _h, g, w in columns).rstrip())
        print(f"\nTotal: {len(records)}")


def print_list_result(title: str, records: Sequence[Any], empty_message: str = "No records found.") -> None:
    columns = COLUMNS_BY_TYPE[type(records[0])] if records else AUTHOR_COLUMNS
    print_records(title, records, columns, empty_message)


def print_detail(title: str, record: Any, fields: List[Tuple[str, Any]]) -> None:
    """Print a single record as label/value lines (or JSON / a Rich panel)."""
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(record.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {escape(str(value))}" for label, value in fields)
        _console.print(Panel.fit(content, title=title, border_style="green"))
    else:
        print(title)
        for label, value in fields:
            print(f"{label}: {value}")


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print statistics in the current output mode."""
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    labels = [
        ("Total Books", "total_books"),
        ("Active Books", "active_books"),
        ("Copies Available", "available_copies"),
        ("Total Copies", "total_copies"),
        ("Total Users", "total_users"),
        ("Active Users", "active_users"),
        ("Active Loans", "active_loans"),
        ("Overdue Loans", "overdue_loans"),
        ("Pending Fines", "pending_fines"),
        ("Pending Amount", "pending_amount"),
    ]

    def fmt(key: str) -> str:
        value = stats.get(key, 0)
        return _money(value) if key == "pending_amount" else str(value)

    if mode == "json":
        payload = {key: (float(stats[key]) if key == "pending_amount" else stats[key]) for _l, key in labels if key in stats}
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {fmt(key)}" for label, key in labels)
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for label, key in labels:
            print(f"{label}: {fmt(key)}")
