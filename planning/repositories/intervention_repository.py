# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Intervention data access.
"""

from datetime import date

from planning.models.domain import Intervention
from planning.repositories.base import InMemoryRepository


class InterventionRepository(InMemoryRepository[Intervention]):
    """In-memory intervention storage."""

    def get_by_date(self, day: date) -> list[Intervention]:
        return [i for i in self._store.values() if i.date == day]

    def get_between(self, start: date, end: date) -> list[Intervention]:
        return [i for i in self._store.values() if start <= i.date <= end]
