# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Planning store — the single owner of all planning state.

Wraps the repositories and services behind one command interface with an
explicit load / save lifecycle. Every mutation runs under one re-entrant
lock so the check-then-act rules (name uniqueness, technician cap, usage
increments) stay atomic; accepted mutations are persisted right away.
"""

import functools
import threading
from typing import Any, Callable, Iterable, Optional

from planning.core.config import settings
from planning.core.logging import get_logger
from planning.metrics.prometheus import ACTIVE_TECHNICIANS, INTERVENTIONS_STORED
from planning.models.domain import Intervention, Keyword, Technician
from planning.repositories.intervention_repository import InterventionRepository
from planning.repositories.keyword_repository import KeywordRepository
from planning.repositories.technician_repository import TechnicianRepository
from planning.schemas.planning import MutationResult
from planning.services.intervention_service import InterventionService
from planning.services.keyword_service import EQUIPMENT, TASK, KeywordService
from planning.services.layout import LayoutEvent, layout_day
from planning.services.persistence import PersistenceAdapter, PlanningSnapshot
from planning.services.query_service import DateLike, QueryService
from planning.services.technician_service import TechnicianService
from planning.utils.timeslots import now_ms

logger = get_logger(__name__)


def _mutation(method: Callable) -> Callable:
    """Run under the store lock; autosave unless the result is a rejection."""

    @functools.wraps(method)
    def wrapper(self: "PlanningStore", *args, **kwargs):
        with self._lock:
            result = method(self, *args, **kwargs)
            rejected = isinstance(result, MutationResult) and not result.ok
            if not rejected and self._autosave:
                self.save()
            return result

    return wrapper


class PlanningStore:
    """Interventions, technicians, keyword dictionaries and the technician filter."""

    def __init__(
        self,
        persistence: Optional[PersistenceAdapter] = None,
        clock: Callable[[], int] = now_ms,
        autosave: Optional[bool] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._persistence = persistence
        self._autosave = (settings.AUTOSAVE if autosave is None else autosave) and (
            persistence is not None
        )

        self._intervention_repo = InterventionRepository()
        self._technician_repo = TechnicianRepository()
        self._task_keyword_repo = KeywordRepository(TASK)
        self._equipment_keyword_repo = KeywordRepository(EQUIPMENT)
        self._selected_filters: list[str] = []

        self.technicians = TechnicianService(self._technician_repo, clock=clock)
        self.task_keywords = KeywordService(self._task_keyword_repo)
        self.equipment_keywords = KeywordService(self._equipment_keyword_repo)
        self.interventions = InterventionService(
            self._intervention_repo,
            self.technicians,
            self.task_keywords,
            self.equipment_keywords,
            clock=clock,
        )
        self.queries = QueryService(
            self._intervention_repo,
            self._technician_repo,
            {TASK: self._task_keyword_repo, EQUIPMENT: self._equipment_keyword_repo},
        )

        self.task_keywords.seed_defaults()
        self.equipment_keywords.seed_defaults()

    # ── Lifecycle ──

    def load(self) -> None:
        """Replace the in-memory state with the persisted one (once, at startup)."""
        if self._persistence is None:
            return
        snapshot = self._persistence.load()
        with self._lock:
            self.restore(snapshot)

    def restore(self, snapshot: PlanningSnapshot) -> None:
        with self._lock:
            self._intervention_repo.replace_all(snapshot.interventions)
            self._technician_repo.replace_all(snapshot.technicians)
            self._task_keyword_repo.replace_all(snapshot.task_keywords)
            self._equipment_keyword_repo.replace_all(snapshot.equipment_keywords)
            self._selected_filters = list(snapshot.selected_technician_filters)
            INTERVENTIONS_STORED.set(self._intervention_repo.count())
            ACTIVE_TECHNICIANS.set(len(self._technician_repo.get_active()))

    def snapshot(self) -> PlanningSnapshot:
        with self._lock:
            return PlanningSnapshot(
                interventions=dict(self._intervention_repo.store),
                technicians=dict(self._technician_repo.store),
                task_keywords=dict(self._task_keyword_repo.store),
                equipment_keywords=dict(self._equipment_keyword_repo.store),
                selected_technician_filters=list(self._selected_filters),
            )

    def save(self) -> bool:
        """Persist the current state; False (logged) on failure or without a backend."""
        if self._persistence is None:
            return False
        return self._persistence.save(self.snapshot())

    # ── Interventions ──

    @_mutation
    def create_intervention(self, data: Any) -> MutationResult:
        return self.interventions.create_intervention(data)

    @_mutation
    def update_intervention(self, intervention_id: str, changes: Any) -> MutationResult:
        return self.interventions.update_intervention(intervention_id, changes)

    @_mutation
    def delete_intervention(self, intervention_id: str) -> MutationResult:
        return self.interventions.delete_intervention(intervention_id)

    @_mutation
    def reassign_intervention(
        self, intervention_id: str, technician_id: str, day: DateLike
    ) -> MutationResult:
        return self.interventions.reassign_intervention(intervention_id, technician_id, day)

    @_mutation
    def duplicate_intervention(
        self, intervention_id: str, day: Optional[DateLike] = None
    ) -> MutationResult:
        return self.interventions.duplicate_intervention(intervention_id, day)

    @_mutation
    def attach_document(self, intervention_id: str, url: str, name: str) -> MutationResult:
        return self.interventions.set_attachment(intervention_id, url, name)

    @_mutation
    def detach_document(self, intervention_id: str) -> MutationResult:
        return self.interventions.set_attachment(intervention_id, None, None)

    def get_intervention(self, intervention_id: str) -> Optional[Intervention]:
        return self._intervention_repo.get(intervention_id)

    # ── Technicians ──

    @_mutation
    def add_technician(self, name: str, color: Optional[str] = None) -> MutationResult:
        return self.technicians.add_technician(name, color)

    @_mutation
    def get_or_create_technician(self, name: str) -> Optional[Technician]:
        return self.technicians.get_or_create_technician(name)

    @_mutation
    def update_technician(
        self,
        technician_id: str,
        name: Optional[str] = None,
        color: Optional[str] = None,
    ) -> MutationResult:
        return self.technicians.update_technician(technician_id, name=name, color=color)

    @_mutation
    def deactivate_technician(self, technician_id: str) -> MutationResult:
        """Soft delete; the technician also leaves the filter selection."""
        result = self.technicians.set_active(technician_id, False)
        if result.ok:
            self._selected_filters = [t for t in self._selected_filters if t != technician_id]
        return result

    @_mutation
    def reactivate_technician(self, technician_id: str) -> MutationResult:
        return self.technicians.set_active(technician_id, True)

    @_mutation
    def increment_technician_usage(self, technician_id: str) -> None:
        self.technicians.increment_usage(technician_id)

    def get_technician(self, technician_id: str) -> Optional[Technician]:
        return self._technician_repo.get(technician_id)

    def check_technician_name(self, name: str) -> MutationResult:
        return self.technicians.check_name(name)

    # ── Keywords ──

    def keywords(self, kind: str) -> KeywordService:
        if kind == TASK:
            return self.task_keywords
        if kind == EQUIPMENT:
            return self.equipment_keywords
        raise ValueError(f"Unknown keyword kind '{kind}'")

    @_mutation
    def add_keyword(self, kind: str, text: str, shortcut: Optional[str] = None) -> MutationResult:
        return self.keywords(kind).add_keyword(text, shortcut)

    @_mutation
    def update_keyword(
        self,
        kind: str,
        keyword_id: str,
        text: Optional[str] = None,
        shortcut: Optional[str] = None,
    ) -> MutationResult:
        return self.keywords(kind).update_keyword(keyword_id, text=text, shortcut=shortcut)

    @_mutation
    def delete_keyword(self, kind: str, keyword_id: str) -> MutationResult:
        return self.keywords(kind).delete_keyword(keyword_id)

    @_mutation
    def get_or_create_keyword(
        self, kind: str, text: str, shortcut: Optional[str] = None
    ) -> Optional[Keyword]:
        return self.keywords(kind).get_or_create(text, shortcut)

    @_mutation
    def increment_keyword_usage(self, kind: str, keyword_id: str) -> None:
        self.keywords(kind).increment_usage(keyword_id)

    def check_keyword_text(self, kind: str, text: str) -> MutationResult:
        return self.keywords(kind).check_text(text)

    # Named shortcuts for the two dictionaries.

    def add_task_keyword(self, text: str, shortcut: Optional[str] = None) -> MutationResult:
        return self.add_keyword(TASK, text, shortcut)

    def update_task_keyword(self, keyword_id: str, text=None, shortcut=None) -> MutationResult:
        return self.update_keyword(TASK, keyword_id, text=text, shortcut=shortcut)

    def delete_task_keyword(self, keyword_id: str) -> MutationResult:
        return self.delete_keyword(TASK, keyword_id)

    def get_or_create_task_keyword(self, text: str, shortcut: Optional[str] = None):
        return self.get_or_create_keyword(TASK, text, shortcut)

    def add_equipment_keyword(self, text: str, shortcut: Optional[str] = None) -> MutationResult:
        return self.add_keyword(EQUIPMENT, text, shortcut)

    def update_equipment_keyword(self, keyword_id: str, text=None, shortcut=None) -> MutationResult:
        return self.update_keyword(EQUIPMENT, keyword_id, text=text, shortcut=shortcut)

    def delete_equipment_keyword(self, keyword_id: str) -> MutationResult:
        return self.delete_keyword(EQUIPMENT, keyword_id)

    def get_or_create_equipment_keyword(self, text: str, shortcut: Optional[str] = None):
        return self.get_or_create_keyword(EQUIPMENT, text, shortcut)

    # ── Technician filter ──

    @property
    def selected_technician_filters(self) -> list[str]:
        return list(self._selected_filters)

    @_mutation
    def set_technician_filters(self, technician_ids: Iterable[str]) -> list[str]:
        self._selected_filters = list(dict.fromkeys(technician_ids))
        return self.selected_technician_filters

    @_mutation
    def toggle_technician_filter(self, technician_id: str) -> list[str]:
        if technician_id in self._selected_filters:
            self._selected_filters = [t for t in self._selected_filters if t != technician_id]
        else:
            self._selected_filters = self._selected_filters + [technician_id]
        return self.selected_technician_filters

    @_mutation
    def clear_technician_filters(self) -> list[str]:
        self._selected_filters = []
        return []

    # ── Queries ──

    def interventions_by_date(self, day: DateLike) -> list[Intervention]:
        return self.queries.interventions_by_date(day)

    def filtered_interventions_by_date(
        self, day: DateLike, technician_filter: Optional[Iterable[str]] = None
    ) -> list[Intervention]:
        """Without an explicit filter, the persisted selection applies."""
        selection = self._selected_filters if technician_filter is None else technician_filter
        return self.queries.filtered_interventions_by_date(day, selection)

    def interventions_between(self, start: DateLike, end: DateLike) -> list[Intervention]:
        return self.queries.interventions_between(start, end)

    def day_layout(
        self, day: DateLike, technician_filter: Optional[Iterable[str]] = None
    ) -> list[LayoutEvent]:
        """Filtered interventions of `day` with their overlap columns."""
        return layout_day(self.filtered_interventions_by_date(day, technician_filter))

    def active_technicians(self) -> list[Technician]:
        return self.queries.active_technicians()

    def top_technicians(self, limit: Optional[int] = None) -> list[Technician]:
        return self.queries.top_technicians(limit)

    def search_technicians(self, query: str) -> list[Technician]:
        return self.queries.search_technicians(query)

    def all_keywords(self, kind: str) -> list[Keyword]:
        return self.queries.all_keywords(kind)

    def top_keywords(self, kind: str, limit: Optional[int] = None) -> list[Keyword]:
        return self.queries.top_keywords(kind, limit)

    def search_keywords(self, kind: str, query: str) -> list[Keyword]:
        return self.queries.search_keywords(kind, query)

    def day_recap(
        self, day: DateLike, technician_ids: Iterable[str] = ()
    ) -> list[dict[str, Any]]:
        return self.queries.day_recap(day, technician_ids)

    def technician_week(self, anchor: DateLike) -> list[dict[str, Any]]:
        return self.queries.technician_week(anchor, self._selected_filters)

    def flagged_interventions(self) -> list[Intervention]:
        return self.queries.flagged_interventions(self.interventions.max_technicians)
