# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: shared in-memory map keyed by record id.
NO business rules here — pure CRUD.
"""

from typing import Generic, Optional, TypeVar

from planning.models.domain import Record

R = TypeVar("R", bound=Record)


class InMemoryRepository(Generic[R]):
    """id -> record storage."""

    def __init__(self) -> None:
        self._store: dict[str, R] = {}

    # ── Read ──

    def get_all(self) -> list[R]:
        return list(self._store.values())

    def get(self, record_id: str) -> Optional[R]:
        return self._store.get(record_id)

    def exists(self, record_id: str) -> bool:
        return record_id in self._store

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def save(self, record: R) -> None:
        self._store[record.id] = record

    def delete(self, record_id: str) -> Optional[R]:
        return self._store.pop(record_id, None)

    # ── Bulk / internal ──

    def replace_all(self, records: dict[str, R]) -> None:
        self._store = dict(records)

    def clear(self) -> None:
        self._store.clear()

    @property
    def store(self) -> dict[str, R]:
        """Direct access for persistence snapshots and tests."""
        return self._store
