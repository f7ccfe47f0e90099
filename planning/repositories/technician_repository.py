# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Technician data access.
"""

from typing import Optional

from planning.models.domain import Technician
from planning.repositories.base import InMemoryRepository


class TechnicianRepository(InMemoryRepository[Technician]):
    """In-memory technician storage. Records are never deleted."""

    def find_by_name(self, name: str) -> Optional[Technician]:
        """Case-insensitive lookup on the trimmed name."""
        normalized = name.strip().lower()
        for technician in self._store.values():
            if technician.name.lower() == normalized:
                return technician
        return None

    def get_active(self) -> list[Technician]:
        return [t for t in self._store.values() if t.is_active]

    def colors(self) -> list[str]:
        return [t.color for t in self._store.values()]
