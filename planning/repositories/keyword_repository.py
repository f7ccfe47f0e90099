# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Keyword dictionary data access.
One instance per dictionary kind (task, equipment).
"""

from typing import Optional

from planning.models.domain import Keyword
from planning.repositories.base import InMemoryRepository


class KeywordRepository(InMemoryRepository[Keyword]):
    """In-memory keyword storage for one dictionary kind."""

    def __init__(self, kind: str) -> None:
        super().__init__()
        self.kind = kind

    def find_by_text(self, text: str) -> Optional[Keyword]:
        """Case-insensitive lookup on the trimmed text."""
        normalized = text.strip().lower()
        for keyword in self._store.values():
            if keyword.text.lower() == normalized:
                return keyword
        return None
