# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Technician management — business logic for the roster.
Technicians are soft-deleted (deactivated) so past interventions keep
their attribution.
"""

import uuid
from typing import Callable, Optional

from planning.core.logging import get_logger
from planning.metrics.prometheus import ACTIVE_TECHNICIANS
from planning.models.domain import Technician
from planning.repositories.technician_repository import TechnicianRepository
from planning.schemas.planning import MutationResult, MutationStatus
from planning.services.outcomes import reject
from planning.utils.colors import least_used_color, normalize_color
from planning.utils.timeslots import now_ms

logger = get_logger(__name__)


class TechnicianService:
    """Business logic for technicians."""

    def __init__(
        self,
        technician_repo: TechnicianRepository,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._technicians = technician_repo
        self._clock = clock

    def _refresh_gauge(self) -> None:
        ACTIVE_TECHNICIANS.set(len(self._technicians.get_active()))

    # ── Commands ──

    def add_technician(self, name: str, color: Optional[str] = None) -> MutationResult:
        """
        Add a technician. A case-insensitive name match returns the existing
        record unchanged. A color outside the palette is replaced by the
        least-used palette color.
        """
        cleaned = (name or "").strip()
        if not cleaned:
            return reject(
                logger, "add_technician", MutationStatus.INVALID_INPUT,
                "Technician name must not be empty",
            )

        existing = self._technicians.find_by_name(cleaned)
        if existing is not None:
            return MutationResult.accepted(existing, "Technician already exists")

        palette_color = normalize_color(color)
        if palette_color is None:
            palette_color = least_used_color(self._technicians.colors())

        now = self._clock()
        technician = Technician(
            id=str(uuid.uuid4()),
            name=cleaned,
            color=palette_color,
            is_active=True,
            usage_count=0,
            created_at=now,
            updated_at=now,
        )
        self._technicians.save(technician)
        self._refresh_gauge()
        logger.info("Technician added: name=%s, color=%s", cleaned, palette_color)
        return MutationResult.accepted(technician)

    def get_or_create_technician(self, name: str) -> Optional[Technician]:
        existing = self._technicians.find_by_name(name or "")
        if existing is not None:
            return existing
        return self.add_technician(name).record

    def update_technician(
        self,
        technician_id: str,
        name: Optional[str] = None,
        color: Optional[str] = None,
    ) -> MutationResult:
        technician = self._technicians.get(technician_id)
        if technician is None:
            return reject(
                logger, "update_technician", MutationStatus.NOT_FOUND,
                f"No technician '{technician_id}'",
            )

        changes: dict = {}
        if color is not None:
            palette_color = normalize_color(color)
            if palette_color is None:
                return reject(
                    logger, "update_technician", MutationStatus.INVALID_COLOR,
                    f"Color '{color}' is not in the palette",
                )
            changes["color"] = palette_color

        if name is not None:
            cleaned = name.strip()
            if not cleaned:
                return reject(
                    logger, "update_technician", MutationStatus.INVALID_INPUT,
                    "Technician name must not be empty",
                )
            clash = self._technicians.find_by_name(cleaned)
            if clash is not None and clash.id != technician_id:
                return reject(
                    logger, "update_technician", MutationStatus.DUPLICATE_NAME,
                    f"Technician '{cleaned}' already exists", record=clash,
                )
            changes["name"] = cleaned

        changes["updated_at"] = self._clock()
        updated = technician.model_copy(update=changes)
        self._technicians.save(updated)
        return MutationResult.accepted(updated)

    def set_active(self, technician_id: str, active: bool) -> MutationResult:
        operation = "reactivate_technician" if active else "deactivate_technician"
        technician = self._technicians.get(technician_id)
        if technician is None:
            return reject(
                logger, operation, MutationStatus.NOT_FOUND,
                f"No technician '{technician_id}'",
            )
        updated = technician.model_copy(
            update={"is_active": active, "updated_at": self._clock()}
        )
        self._technicians.save(updated)
        self._refresh_gauge()
        logger.info("Technician %s: name=%s", "reactivated" if active else "deactivated", updated.name)
        return MutationResult.accepted(updated)

    def increment_usage(self, technician_id: str) -> None:
        """Lifetime assignment counter; unknown ids are ignored."""
        technician = self._technicians.get(technician_id)
        if technician is None:
            logger.debug("Usage increment ignored: unknown technician %s", technician_id)
            return
        self._technicians.save(
            technician.model_copy(update={"usage_count": technician.usage_count + 1})
        )

    # ── Checks ──

    def check_name(self, name: str) -> MutationResult:
        """Report DUPLICATE_NAME when a technician already uses `name`."""
        existing = self._technicians.find_by_name(name or "")
        if existing is not None:
            return MutationResult.rejected(
                MutationStatus.DUPLICATE_NAME,
                f"Technician '{existing.name}' already exists",
                record=existing,
            )
        return MutationResult.accepted()
