"""In-Memory Storage Adapter.

This adapter implements the RecordStorePort contract by keeping every
collection in process memory. State lives for the lifetime of the store
object and is lost when it is discarded; there is no durability.

Architecture:
    - Implements RecordStorePort (Hexagonal Architecture)
    - One readers-writer lock guards all four collections together, so
      cross-collection reads (search, uniqueness counts) see one consistent
      state and the cascade delete is never observed half done
    - Records are copied on the way in and on the way out; callers never
      hold references into the store's own dictionaries
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from pydantic import BaseModel

from patient_registry.domain.ports import (
    R,
    RecordKind,
    RecordNotFoundError,
    RecordStorePort,
    StoreSession,
)
from patient_registry.infrastructure.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


class _InMemorySession(StoreSession):
    """Session over the store's collections.

    Holds no lock itself; InMemoryRecordStore only hands it out while the
    matching lock is held. A read session rejects mutations.
    """

    def __init__(self, store: 'InMemoryRecordStore', writable: bool):
        self._store = store
        self._writable = writable

    def _require_writable(self, operation: str) -> None:
        """Raise RuntimeError when a read session attempts ``operation``."""
        if not self._writable:
            raise RuntimeError(f"{operation}() is not allowed in a read session")

    def insert(self, kind: RecordKind, record: R) -> int:
        """Store a copy of ``record`` under the next id of ``kind``.

        Returns:
            int: The assigned id
        """
        self._require_writable("insert")
        record_id = self._store._next_ids[kind]
        self._store._next_ids[kind] = record_id + 1
        self._store._tables[kind][record_id] = record.model_copy(update={"id": record_id}, deep=True)
        return record_id

    def get(self, kind: RecordKind, record_id: int) -> BaseModel:
        """Return a copy of one record. Raises RecordNotFoundError if absent."""
        record = self._store._tables[kind].get(record_id)
        if record is None:
            raise RecordNotFoundError(kind, record_id)
        return record.model_copy(deep=True)

    def update(self, kind: RecordKind, record_id: int, record: R) -> None:
        """Replace a record, keeping its id. Raises RecordNotFoundError if absent."""
        self._require_writable("update")
        table = self._store._tables[kind]
        if record_id not in table:
            raise RecordNotFoundError(kind, record_id)
        table[record_id] = record.model_copy(update={"id": record_id}, deep=True)

    def delete(self, kind: RecordKind, record_id: int) -> BaseModel:
        """Remove and return a record. Raises RecordNotFoundError if absent."""
        self._require_writable("delete")
        table = self._store._tables[kind]
        if record_id not in table:
            raise RecordNotFoundError(kind, record_id)
        return table.pop(record_id)

    def delete_where(self, kind: RecordKind, predicate: Callable[[Any], bool]) -> int:
        """Remove every record matching ``predicate``.

        Returns:
            int: Number of records removed (zero is not an error)
        """
        self._require_writable("delete_where")
        table = self._store._tables[kind]
        doomed = [record_id for record_id, record in table.items() if predicate(record)]
        for record_id in doomed:
            del table[record_id]
        return len(doomed)

    def scan(self, kind: RecordKind) -> list:
        """Return copies of all records of ``kind``."""
        return [record.model_copy(deep=True) for record in self._store._tables[kind].values()]

    def count(self, kind: RecordKind, predicate: Optional[Callable[[Any], bool]] = None) -> int:
        """Count records of ``kind``, optionally only those matching ``predicate``."""
        table = self._store._tables[kind]
        if predicate is None:
            return len(table)
        return sum(1 for record in table.values() if predicate(record))

    def find_first(self, kind: RecordKind, predicate: Callable[[Any], bool]) -> Optional[BaseModel]:
        """Return a copy of the first match, or None."""
        for record in self._store._tables[kind].values():
            if predicate(record):
                return record.model_copy(deep=True)
        return None


class InMemoryRecordStore(RecordStorePort):
    """Volatile RecordStorePort implementation.

    Every kind has its own id sequence starting at 1. Ids are never reused,
    even after the record holding them is deleted.

    Example Usage:
        ```python
        store = InMemoryRecordStore()
        patient_id = store.insert(RecordKind.PATIENT, patient)

        with store.read_session() as session:
            patients = session.scan(RecordKind.PATIENT)
        ```
    """

    def __init__(self):
        self._lock = ReadWriteLock()
        self._tables: dict[RecordKind, dict[int, BaseModel]] = {kind: {} for kind in RecordKind}
        self._next_ids: dict[RecordKind, int] = {kind: 1 for kind in RecordKind}
        logger.debug("Initialized in-memory record store")

    @contextmanager
    def read_session(self) -> Iterator[StoreSession]:
        """Yield a read-only session while holding the shared lock."""
        with self._lock.read_locked():
            yield _InMemorySession(self, writable=False)

    @contextmanager
    def write_session(self) -> Iterator[StoreSession]:
        """Yield a writable session while holding the exclusive lock."""
        with self._lock.write_locked():
            yield _InMemorySession(self, writable=True)
