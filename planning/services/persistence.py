# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Persistence adapter — serializes the store state to one JSON
document under a namespace key and restores it at startup.

Saves are fire-and-forget: a failed save is logged and counted, never
raised. A failed load falls back to the default (empty, seeded) state.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import ValidationError

from planning.core.config import settings
from planning.core.errors import StorageError
from planning.core.logging import get_logger
from planning.metrics.prometheus import PERSISTENCE_LOADS, PERSISTENCE_SAVES
from planning.models.domain import Intervention, Keyword, Record, Technician
from planning.repositories.blob_repository import BlobRepository
from planning.schemas.planning import PlanningDocument
from planning.services.keyword_service import EQUIPMENT, TASK, default_keywords
from planning.utils.colors import auto_color, normalize_color
from planning.utils.timeslots import now_ms

logger = get_logger(__name__)


@dataclass
class PlanningSnapshot:
    """Everything the store persists."""
    interventions: dict[str, Intervention] = field(default_factory=dict)
    technicians: dict[str, Technician] = field(default_factory=dict)
    task_keywords: dict[str, Keyword] = field(default_factory=lambda: default_keywords(TASK))
    equipment_keywords: dict[str, Keyword] = field(
        default_factory=lambda: default_keywords(EQUIPMENT)
    )
    selected_technician_filters: list[str] = field(default_factory=list)


def _dump_records(records: dict[str, Record]) -> dict[str, dict[str, Any]]:
    return {record_id: record.to_document() for record_id, record in records.items()}


def _load_records(
    model: type[Record], raw_records: dict[str, dict[str, Any]], label: str
) -> dict[str, Record]:
    """Validate each raw record; invalid ones are skipped with a warning."""
    records: dict[str, Record] = {}
    for record_id, raw in raw_records.items():
        if not isinstance(raw, dict):
            logger.warning("Skipping persisted %s %s: not an object", label, record_id)
            continue
        try:
            records[record_id] = model.model_validate({"id": record_id, **raw})
        except ValidationError as exc:
            logger.warning(
                "Skipping persisted %s %s: %d validation errors",
                label,
                record_id,
                exc.error_count(),
            )
    return records


def migrate_technicians(
    raw_technicians: dict[str, dict[str, Any]], loaded_at: int
) -> dict[str, dict[str, Any]]:
    """
    Bring legacy technician records up to date: a missing or off-palette
    color becomes the palette color at the record's position, a missing
    isActive becomes true, missing timestamps become the load time.
    """
    migrated: dict[str, dict[str, Any]] = {}
    for index, (technician_id, raw) in enumerate(raw_technicians.items()):
        if not isinstance(raw, dict):
            migrated[technician_id] = raw
            continue
        record = dict(raw)
        record["color"] = normalize_color(record.get("color")) or auto_color(index)
        if record.get("isActive") is None:
            record["isActive"] = True
        if record.get("createdAt") is None:
            record["createdAt"] = loaded_at
        if record.get("updatedAt") is None:
            record["updatedAt"] = loaded_at
        migrated[technician_id] = record
    return migrated


class PersistenceAdapter:
    """Reads and writes the planning document through a blob repository."""

    def __init__(
        self,
        blob_repo: BlobRepository,
        namespace: Optional[str] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._blobs = blob_repo
        self._namespace = namespace or settings.STORAGE_NAMESPACE
        self._clock = clock

    @property
    def namespace(self) -> str:
        return self._namespace

    # ── Codec ──

    @staticmethod
    def serialize(snapshot: PlanningSnapshot) -> str:
        document = {
            "interventions": _dump_records(snapshot.interventions),
            "technicians": _dump_records(snapshot.technicians),
            "taskKeywords": _dump_records(snapshot.task_keywords),
            "equipmentKeywords": _dump_records(snapshot.equipment_keywords),
            "selectedTechnicianFilters": list(snapshot.selected_technician_filters),
        }
        return json.dumps(document, ensure_ascii=False)

    def deserialize(self, raw: str) -> PlanningSnapshot:
        """Parse, migrate and validate a document. Raises StorageError."""
        try:
            document = PlanningDocument.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            raise StorageError(f"Unreadable planning document: {exc}") from exc

        loaded_at = self._clock()
        technicians = _load_records(
            Technician, migrate_technicians(document.technicians, loaded_at), "technician"
        )
        interventions = _load_records(Intervention, document.interventions, "intervention")
        over_capacity = [
            i.id
            for i in interventions.values()
            if len(i.technician_ids) > settings.MAX_TECHNICIANS_PER_INTERVENTION
        ]
        if over_capacity:
            logger.warning(
                "Loaded %d interventions above the technician cap: %s",
                len(over_capacity),
                over_capacity,
            )

        # Built-in entries sit underneath persisted ones; same id -> persisted wins.
        task_keywords = {
            **default_keywords(TASK),
            **_load_records(Keyword, document.task_keywords, "task keyword"),
        }
        equipment_keywords = {
            **default_keywords(EQUIPMENT),
            **_load_records(Keyword, document.equipment_keywords, "equipment keyword"),
        }

        return PlanningSnapshot(
            interventions=interventions,
            technicians=technicians,
            task_keywords=task_keywords,
            equipment_keywords=equipment_keywords,
            selected_technician_filters=list(document.selected_technician_filters),
        )

    # ── I/O ──

    def load(self) -> PlanningSnapshot:
        """Restore the persisted state, or the default state on any failure."""
        try:
            raw = self._blobs.read(self._namespace)
            if raw is None:
                PERSISTENCE_LOADS.labels(status="empty").inc()
                logger.info("No persisted planning data under '%s'", self._namespace)
                return PlanningSnapshot()
            snapshot = self.deserialize(raw)
        except StorageError as exc:
            PERSISTENCE_LOADS.labels(status="error").inc()
            logger.error(
                "Planning data load failed, starting empty: %s", exc,
                exc_info=True, extra={"namespace": self._namespace},
            )
            return PlanningSnapshot()

        PERSISTENCE_LOADS.labels(status="ok").inc()
        logger.info(
            "Planning data loaded: interventions=%d, technicians=%d",
            len(snapshot.interventions),
            len(snapshot.technicians),
        )
        return snapshot

    def save(self, snapshot: PlanningSnapshot) -> bool:
        """Write the document. Failures are logged but never raised."""
        try:
            self._blobs.write(self._namespace, self.serialize(snapshot))
        except (StorageError, TypeError, ValueError) as exc:
            PERSISTENCE_SAVES.labels(status="error").inc()
            logger.error(
                "Planning data save failed: %s", exc,
                exc_info=True, extra={"namespace": self._namespace},
            )
            return False
        PERSISTENCE_SAVES.labels(status="ok").inc()
        return True
