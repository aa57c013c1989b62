"""Flat-file record store.

Each entity collection is one JSON array on disk (``<collection>.json``) and
each id counter is a one-key document (``contador_<name>.json``). Every
change rewrites the whole collection file.

Only one process may use a data directory at a time: there is no locking,
so two writers overwrite each other's collections (last writer wins).
Writes to different collections are independent; a crash between two saves
leaves them out of step with each other.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from biblioteca.config import settings
from biblioteca.exceptions import StorageError
from biblioteca.models import Author, Book, Category, Fine, Loan, User

logger = logging.getLogger(__name__)

# Collection file names
AUTHORS = "autores"
CATEGORIES = "categorias"
BOOKS = "libros"
USERS = "usuarios"
LOANS = "prestamos"
FINES = "multas"

COLLECTION_TYPES: Dict[str, Callable[[dict], Any]] = {
    AUTHORS: Author.from_dict,
    CATEGORIES: Category.from_dict,
    BOOKS: Book.from_dict,
    USERS: User.from_dict,
    LOANS: Loan.from_dict,
    FINES: Fine.from_dict,
}

T = TypeVar("T")


def _write_json(path: Path, payload: Any) -> None:
    """Write ``payload`` next to ``path`` and swap it in place."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}_", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.replace(tmp_name, path)
    except OSError as e:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise StorageError(f"Could not write {path.name}: {e}") from e


def _read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Could not read {path.name}: {e}") from e


class RecordStore:
    """Loads and saves whole entity collections under ``data_dir``."""

    def __init__(self, data_dir: Optional[str] = None) -> None:
        self.data_dir = Path(data_dir or settings.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def load_all(self, collection: str) -> List[Any]:
        """Return every record of ``collection`` in file order (empty if never saved)."""
        factory = COLLECTION_TYPES[collection]
        path = self.path_for(collection)
        if not path.exists():
            return []
        data = _read_json(path)
        if data is None:
            return []
        if not isinstance(data, list):
            raise StorageError(f"{path.name} does not contain a list of records")
        try:
            return [factory(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed record in {path.name}: {e}") from e

    def save_all(self, collection: str, records: List[Any]) -> None:
        """Overwrite ``collection`` with ``records``."""
        _write_json(self.path_for(collection), [r.to_dict() for r in records])
        logger.debug("Saved %d records to %s", len(records), collection)

    def unit_of_work(self) -> "UnitOfWork":
        return UnitOfWork(self)


class CounterStore:
    """Per-name id counters persisted as ``contador_<name>.json``.

    Counter names are independent of collection names even where they
    coincide.
    """

    def __init__(self, data_dir: Optional[str] = None) -> None:
        self.data_dir = Path(data_dir or settings.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        return self.data_dir / f"contador_{name}.json"

    def current(self, name: str) -> int:
        """The id that the next call to :meth:`next_id` will hand out."""
        path = self.path_for(name)
        if not path.exists():
            return 1
        data = _read_json(path)
        try:
            return int(data["contador"])
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed counter file {path.name}") from e

    def next_id(self, name: str) -> int:
        value = self.current(name)
        _write_json(self.path_for(name), {"contador": value + 1})
        return value


def find_by_id(records: List[T], record_id: int) -> Optional[T]:
    return next((r for r in records if r.id == record_id), None)


def delete_by_id(records: List[T], record_id: int) -> bool:
    """Remove the first record with ``record_id``; False when there is none."""
    for index, record in enumerate(records):
        if record.id == record_id:
            del records[index]
            return True
    return False


class UnitOfWork:
    """Boundary for one service operation.

    Each collection is loaded at most once per unit, so every participant of
    the operation mutates the same list objects. ``save`` writes immediately
    and in call order; nothing is buffered or rolled back.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store
        self._loaded: Dict[str, List[Any]] = {}

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._loaded.clear()

    def collection(self, name: str) -> List[Any]:
        if name not in self._loaded:
            self._loaded[name] = self.store.load_all(name)
        return self._loaded[name]

    def save(self, name: str) -> None:
        self.store.save_all(name, self.collection(name))
