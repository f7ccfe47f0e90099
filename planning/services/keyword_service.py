# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Keyword dictionaries — autocomplete entries for task text and
equipment. One class, instantiated once per dictionary kind.
"""

import uuid
from typing import Optional

from planning.core.logging import get_logger
from planning.metrics.prometheus import KEYWORDS_CREATED
from planning.models.domain import Keyword
from planning.repositories.keyword_repository import KeywordRepository
from planning.schemas.planning import MutationResult, MutationStatus
from planning.services.outcomes import reject

logger = get_logger(__name__)

TASK = "task"
EQUIPMENT = "equipment"

_DEFAULT_TASK_KEYWORDS = [
    ("default-1", "Installation chauffe-eau", "ICE"),
    ("default-2", "Réparation fuite", "RF"),
    ("default-3", "Entretien chaudière", "EC"),
    ("default-4", "Débouchage canalisation", "DC"),
    ("default-5", "Installation radiateur", "IR"),
    ("default-6", "Remplacement robinetterie", "RR"),
    ("default-7", "Diagnostic panne", "DP"),
    ("default-8", "Mise en service", "MES"),
]

_DEFAULT_EQUIPMENT_KEYWORDS = [
    ("equip-1", "Chauffe-eau", "CE"),
    ("equip-2", "Radiateur", "RAD"),
    ("equip-3", "Robinet", "ROB"),
    ("equip-4", "Tuyauterie", "TUY"),
    ("equip-5", "Joints", "JT"),
    ("equip-6", "Pompe", "PMP"),
    ("equip-7", "Outillage standard", "OUT"),
    ("equip-8", "Déboucheur", "DEB"),
]


def default_keywords(kind: str) -> dict[str, Keyword]:
    """Fresh seed entries for a dictionary kind, keyed by id."""
    rows = _DEFAULT_TASK_KEYWORDS if kind == TASK else _DEFAULT_EQUIPMENT_KEYWORDS
    return {
        keyword_id: Keyword(
            id=keyword_id, text=text, shortcut=shortcut, usage_count=0, is_default=True
        )
        for keyword_id, text, shortcut in rows
    }


def normalize_shortcut(shortcut: Optional[str]) -> Optional[str]:
    """Trimmed upper-case shortcut, or None when empty."""
    if shortcut is None:
        return None
    cleaned = shortcut.strip().upper()
    return cleaned or None


class KeywordService:
    """Business rules for one keyword dictionary."""

    def __init__(self, repo: KeywordRepository) -> None:
        self._keywords = repo

    @property
    def kind(self) -> str:
        return self._keywords.kind

    def _operation(self, name: str) -> str:
        return f"{name}_{self.kind}_keyword"

    # ── Commands ──

    def add_keyword(self, text: str, shortcut: Optional[str] = None) -> MutationResult:
        """Create an entry; an existing entry with the same text is returned as-is."""
        cleaned = (text or "").strip()
        if not cleaned:
            return reject(
                logger, self._operation("add"), MutationStatus.INVALID_INPUT,
                "Keyword text must not be empty",
            )

        existing = self._keywords.find_by_text(cleaned)
        if existing is not None:
            return MutationResult.accepted(existing, "Keyword already exists")

        keyword = Keyword(
            id=str(uuid.uuid4()),
            text=cleaned,
            shortcut=normalize_shortcut(shortcut),
            usage_count=0,
            is_default=False,
        )
        self._keywords.save(keyword)
        KEYWORDS_CREATED.labels(kind=self.kind).inc()
        logger.info("Keyword created: kind=%s, text=%s", self.kind, cleaned)
        return MutationResult.accepted(keyword)

    def update_keyword(
        self,
        keyword_id: str,
        text: Optional[str] = None,
        shortcut: Optional[str] = None,
    ) -> MutationResult:
        """
        Rename and/or change the shortcut. An empty or absent shortcut keeps
        the previous one: a shortcut cannot be cleared through an update.
        """
        keyword = self._keywords.get(keyword_id)
        if keyword is None:
            return reject(
                logger, self._operation("update"), MutationStatus.NOT_FOUND,
                f"No {self.kind} keyword '{keyword_id}'",
            )

        changes: dict = {"shortcut": normalize_shortcut(shortcut) or keyword.shortcut}
        if text is not None:
            cleaned = text.strip()
            if not cleaned:
                return reject(
                    logger, self._operation("update"), MutationStatus.INVALID_INPUT,
                    "Keyword text must not be empty",
                )
            clash = self._keywords.find_by_text(cleaned)
            if clash is not None and clash.id != keyword_id:
                return reject(
                    logger, self._operation("update"), MutationStatus.DUPLICATE_TEXT,
                    f"{self.kind} keyword '{cleaned}' already exists", record=clash,
                )
            changes["text"] = cleaned

        updated = keyword.model_copy(update=changes)
        self._keywords.save(updated)
        return MutationResult.accepted(updated)

    def delete_keyword(self, keyword_id: str) -> MutationResult:
        removed = self._keywords.delete(keyword_id)
        if removed is None:
            return reject(
                logger, self._operation("delete"), MutationStatus.NOT_FOUND,
                f"No {self.kind} keyword '{keyword_id}'",
            )
        logger.info("Keyword deleted: kind=%s, text=%s", self.kind, removed.text)
        return MutationResult.accepted(removed)

    def get_or_create(self, text: str, shortcut: Optional[str] = None) -> Optional[Keyword]:
        """Reuse the entry matching `text` case-insensitively, else create it.
        Never increments usage."""
        existing = self._keywords.find_by_text(text or "")
        if existing is not None:
            return existing
        return self.add_keyword(text, shortcut).record

    def increment_usage(self, keyword_id: str) -> None:
        keyword = self._keywords.get(keyword_id)
        if keyword is None:
            logger.debug("Usage increment ignored: unknown %s keyword %s", self.kind, keyword_id)
            return
        self._keywords.save(keyword.model_copy(update={"usage_count": keyword.usage_count + 1}))

    # ── Checks ──

    def check_text(self, text: str) -> MutationResult:
        """Report DUPLICATE_TEXT when an entry already uses `text`."""
        existing = self._keywords.find_by_text(text or "")
        if existing is not None:
            return MutationResult.rejected(
                MutationStatus.DUPLICATE_TEXT,
                f"{self.kind} keyword '{existing.text}' already exists",
                record=existing,
            )
        return MutationResult.accepted()

    # ── Seed ──

    def seed_defaults(self) -> None:
        """Insert the built-in entries that are not already present by id."""
        added = 0
        for keyword_id, keyword in default_keywords(self.kind).items():
            if not self._keywords.exists(keyword_id):
                self._keywords.save(keyword)
                added += 1
        if added:
            logger.info("Seeded %d default %s keywords", added, self.kind)
