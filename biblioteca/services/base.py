from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Optional

from biblioteca.storage import CounterStore, RecordStore, UnitOfWork

Clock = Callable[[], datetime]


class Service:
    """Shared wiring: record store, id counters and the clock."""

    def __init__(self, store: RecordStore, counters: CounterStore, clock: Optional[Clock] = None) -> None:
        self.store = store
        self.counters = counters
        self.clock: Clock = clock or datetime.now

    @contextmanager
    def unit(self, uow: Optional[UnitOfWork] = None) -> Iterator[UnitOfWork]:
        """Join the caller's unit of work, or open a new one."""
        if uow is not None:
            yield uow
            return
        with self.store.unit_of_work() as own:
            yield own
