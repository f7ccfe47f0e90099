# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Intervention management — business logic for scheduled jobs.
Coordinates repository writes with usage counters, keyword dictionaries
and metrics.

Usage counts are lifetime write-time counters: editing or deleting an
intervention never decrements them.
"""

import datetime as dt
import uuid
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from planning.core.config import settings
from planning.core.logging import get_logger
from planning.metrics.prometheus import INTERVENTIONS_CREATED, INTERVENTIONS_STORED
from planning.models.domain import Intervention
from planning.repositories.intervention_repository import InterventionRepository
from planning.schemas.planning import (
    InterventionDraft,
    InterventionPatch,
    MutationResult,
    MutationStatus,
)
from planning.services.keyword_service import KeywordService
from planning.services.outcomes import reject, reject_invalid
from planning.services.technician_service import TechnicianService
from planning.utils.timeslots import is_slot_time, is_valid_range, now_ms

logger = get_logger(__name__)

# Fields a patch may not blank out.
_REQUIRED_FIELDS = ("date", "start_time", "end_time", "technician_ids", "task_text")


class InterventionService:
    """Business logic for interventions."""

    def __init__(
        self,
        intervention_repo: InterventionRepository,
        technician_service: TechnicianService,
        task_keywords: KeywordService,
        equipment_keywords: KeywordService,
        clock: Callable[[], int] = now_ms,
        max_technicians: Optional[int] = None,
    ) -> None:
        self._interventions = intervention_repo
        self._technicians = technician_service
        self._task_keywords = task_keywords
        self._equipment_keywords = equipment_keywords
        self._clock = clock
        self._max_technicians = max_technicians or settings.MAX_TECHNICIANS_PER_INTERVENTION

    @property
    def max_technicians(self) -> int:
        return self._max_technicians

    def _capacity_exceeded(self, operation: str, count: int) -> MutationResult:
        return reject(
            logger, operation, MutationStatus.CAPACITY_EXCEEDED,
            f"{count} technicians assigned, maximum is {self._max_technicians}",
        )

    def _off_grid(self, operation: str, times: list) -> Optional[MutationResult]:
        for value in times:
            if not is_slot_time(value):
                return reject(
                    logger, operation, MutationStatus.INVALID_TIME_RANGE,
                    f"{value} is not a {settings.SLOT_MINUTES}-minute slot between "
                    f"{settings.OPERATING_WINDOW_START} and {settings.OPERATING_WINDOW_END}",
                )
        return None

    # ── Commands ──

    def create_intervention(
        self, data: Union[InterventionDraft, dict[str, Any]]
    ) -> MutationResult:
        """
        Insert a new intervention, then bump usage of every assigned
        technician and of the task / equipment keywords (created on the fly).
        Rejected without any change on capacity violations, times off the
        slot grid or outside the operating window, and inverted ranges.
        """
        try:
            draft = (
                data if isinstance(data, InterventionDraft)
                else InterventionDraft.model_validate(data)
            )
        except ValidationError as exc:
            return reject_invalid(logger, "create_intervention", exc)

        if len(draft.technician_ids) > self._max_technicians:
            return self._capacity_exceeded("create_intervention", len(draft.technician_ids))
        off_grid = self._off_grid("create_intervention", [draft.start_time, draft.end_time])
        if off_grid is not None:
            return off_grid
        if not is_valid_range(draft.start_time, draft.end_time):
            return reject(
                logger, "create_intervention", MutationStatus.INVALID_TIME_RANGE,
                f"End {draft.end_time} is not after start {draft.start_time}",
            )

        now = self._clock()
        intervention = Intervention(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            **draft.model_dump(),
        )
        self._interventions.save(intervention)
        INTERVENTIONS_CREATED.inc()
        INTERVENTIONS_STORED.set(self._interventions.count())

        for technician_id in intervention.technician_ids:
            self._technicians.increment_usage(technician_id)
        if intervention.task_text.strip():
            keyword = self._task_keywords.get_or_create(intervention.task_text)
            if keyword is not None:
                self._task_keywords.increment_usage(keyword.id)
        if intervention.equipment and intervention.equipment.strip():
            keyword = self._equipment_keywords.get_or_create(intervention.equipment)
            if keyword is not None:
                self._equipment_keywords.increment_usage(keyword.id)

        logger.info(
            "Intervention created: id=%s, date=%s, %s-%s, technicians=%d",
            intervention.id,
            intervention.date,
            intervention.start_time,
            intervention.end_time,
            len(intervention.technician_ids),
        )
        return MutationResult.accepted(intervention)

    def update_intervention(
        self,
        intervention_id: str,
        changes: Union[InterventionPatch, dict[str, Any]],
    ) -> MutationResult:
        """Shallow-merge the provided fields. Usage counts are left alone."""
        existing = self._interventions.get(intervention_id)
        if existing is None:
            return reject(
                logger, "update_intervention", MutationStatus.NOT_FOUND,
                f"No intervention '{intervention_id}'",
            )

        try:
            patch = (
                changes if isinstance(changes, InterventionPatch)
                else InterventionPatch.model_validate(changes)
            )
        except ValidationError as exc:
            return reject_invalid(logger, "update_intervention", exc)

        fields = {
            key: value
            for key, value in patch.changes().items()
            if not (key in _REQUIRED_FIELDS and value is None)
        }

        technician_ids = fields.get("technician_ids")
        if technician_ids is not None and len(technician_ids) > self._max_technicians:
            return self._capacity_exceeded("update_intervention", len(technician_ids))

        off_grid = self._off_grid(
            "update_intervention",
            [fields[key] for key in ("start_time", "end_time") if key in fields],
        )
        if off_grid is not None:
            return off_grid

        start = fields.get("start_time", existing.start_time)
        end = fields.get("end_time", existing.end_time)
        if ("start_time" in fields or "end_time" in fields) and not is_valid_range(start, end):
            return reject(
                logger, "update_intervention", MutationStatus.INVALID_TIME_RANGE,
                f"End {end} is not after start {start}",
            )

        fields["updated_at"] = self._clock()
        updated = existing.model_copy(update=fields)
        self._interventions.save(updated)
        logger.info(
            "Intervention updated: id=%s, fields=%s",
            intervention_id,
            sorted(k for k in fields if k != "updated_at"),
        )
        return MutationResult.accepted(updated)

    def delete_intervention(self, intervention_id: str) -> MutationResult:
        """Hard delete. Usage counts are not reversed."""
        removed = self._interventions.delete(intervention_id)
        if removed is None:
            return reject(
                logger, "delete_intervention", MutationStatus.NOT_FOUND,
                f"No intervention '{intervention_id}'",
            )
        INTERVENTIONS_STORED.set(self._interventions.count())
        logger.info("Intervention deleted: id=%s", intervention_id)
        return MutationResult.accepted(removed)

    def reassign_intervention(
        self, intervention_id: str, technician_id: str, day: Union[dt.date, str]
    ) -> MutationResult:
        """
        Move an intervention to `day` with `technician_id` as primary.
        Already primary: order kept. Already assigned: promoted to first.
        Otherwise: replaces the previous primary, co-workers kept.
        """
        existing = self._interventions.get(intervention_id)
        if existing is None:
            return reject(
                logger, "reassign_intervention", MutationStatus.NOT_FOUND,
                f"No intervention '{intervention_id}'",
            )

        current = existing.technician_ids
        if current and current[0] == technician_id:
            technician_ids = list(current)
        elif technician_id in current:
            technician_ids = [technician_id] + [t for t in current if t != technician_id]
        else:
            technician_ids = [technician_id] + list(current[1:])

        return self.update_intervention(
            intervention_id, {"date": day, "technician_ids": technician_ids}
        )

    def duplicate_intervention(
        self, intervention_id: str, day: Optional[Union[dt.date, str]] = None
    ) -> MutationResult:
        """Create a copy (optionally on another day). The attachment is not copied."""
        source = self._interventions.get(intervention_id)
        if source is None:
            return reject(
                logger, "duplicate_intervention", MutationStatus.NOT_FOUND,
                f"No intervention '{intervention_id}'",
            )
        data = source.model_dump(
            exclude={"id", "created_at", "updated_at", "pdf_url", "pdf_name"}
        )
        if day is not None:
            data["date"] = day
        return self.create_intervention(data)

    def set_attachment(
        self, intervention_id: str, url: Optional[str], name: Optional[str]
    ) -> MutationResult:
        """Store (or clear, with None) the attachment reference."""
        return self.update_intervention(
            intervention_id, InterventionPatch(pdf_url=url, pdf_name=name)
        )
