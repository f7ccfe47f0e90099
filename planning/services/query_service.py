# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Calendar queries — read-only views over the entity repositories.
Every ordering here is total, so calendars render the same way each time.
"""

import calendar
import datetime as dt
from typing import Any, Iterable, Optional, Union

from planning.core.config import settings
from planning.models.domain import Intervention, Keyword, Technician
from planning.repositories.intervention_repository import InterventionRepository
from planning.repositories.keyword_repository import KeywordRepository
from planning.repositories.technician_repository import TechnicianRepository

DateLike = Union[dt.date, str]


def as_date(value: DateLike) -> dt.date:
    """Accept a date or an ISO "YYYY-MM-DD" string."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(value)


def week_days(anchor: DateLike, days: int = 5) -> list[dt.date]:
    """`days` consecutive dates starting on the Monday of `anchor`'s week."""
    day = as_date(anchor)
    monday = day - dt.timedelta(days=day.weekday())
    return [monday + dt.timedelta(days=i) for i in range(days)]


def month_grid(anchor: DateLike) -> list[dt.date]:
    """Monday-to-Sunday weeks covering the whole month of `anchor`."""
    day = as_date(anchor)
    first = day.replace(day=1)
    last = day.replace(day=calendar.monthrange(day.year, day.month)[1])
    start = first - dt.timedelta(days=first.weekday())
    end = last + dt.timedelta(days=6 - last.weekday())
    return [start + dt.timedelta(days=i) for i in range((end - start).days + 1)]


def _intervention_order(intervention: Intervention) -> tuple:
    return (
        intervention.start_time,
        intervention.end_time,
        intervention.task_text or "",
        intervention.id,
    )


def _ranking(record: Union[Technician, Keyword]) -> tuple:
    return (-record.usage_count, record.id)


class QueryService:
    """Derived views consumed by the month, week and per-technician calendars."""

    def __init__(
        self,
        intervention_repo: InterventionRepository,
        technician_repo: TechnicianRepository,
        keyword_repos: dict[str, KeywordRepository],
    ) -> None:
        self._interventions = intervention_repo
        self._technicians = technician_repo
        self._keywords = keyword_repos

    # ── Interventions ──

    def interventions_by_date(self, day: DateLike) -> list[Intervention]:
        """Sorted by start, then end, then task text."""
        return sorted(self._interventions.get_by_date(as_date(day)), key=_intervention_order)

    def filtered_interventions_by_date(
        self, day: DateLike, technician_filter: Iterable[str] = ()
    ) -> list[Intervention]:
        """An empty filter shows everything; otherwise any selected technician matches."""
        interventions = self.interventions_by_date(day)
        selected = set(technician_filter)
        if not selected:
            return interventions
        return [i for i in interventions if selected.intersection(i.technician_ids)]

    def interventions_between(self, start: DateLike, end: DateLike) -> list[Intervention]:
        """Inclusive date range, by date then the per-day order."""
        return sorted(
            self._interventions.get_between(as_date(start), as_date(end)),
            key=lambda i: (i.date, _intervention_order(i)),
        )

    def flagged_interventions(self, max_technicians: Optional[int] = None) -> list[Intervention]:
        """Legacy interventions carrying more technicians than allowed."""
        cap = max_technicians or settings.MAX_TECHNICIANS_PER_INTERVENTION
        return sorted(
            (i for i in self._interventions.get_all() if len(i.technician_ids) > cap),
            key=lambda i: (i.date, _intervention_order(i)),
        )

    # ── Technicians ──

    def active_technicians(self) -> list[Technician]:
        """Most used first; ties by id."""
        return sorted(self._technicians.get_active(), key=_ranking)

    def top_technicians(self, limit: Optional[int] = None) -> list[Technician]:
        if limit is None:
            limit = settings.DEFAULT_TOP_TECHNICIANS
        return self.active_technicians()[:limit]

    def search_technicians(self, query: str) -> list[Technician]:
        normalized = (query or "").strip().lower()
        if not normalized:
            return self.top_technicians()
        return [t for t in self.active_technicians() if normalized in t.name.lower()]

    # ── Keywords ──

    def all_keywords(self, kind: str) -> list[Keyword]:
        return sorted(self._keywords[kind].get_all(), key=_ranking)

    def top_keywords(self, kind: str, limit: Optional[int] = None) -> list[Keyword]:
        if limit is None:
            limit = settings.DEFAULT_TOP_KEYWORDS
        return self.all_keywords(kind)[:limit]

    def search_keywords(self, kind: str, query: str) -> list[Keyword]:
        """
        Substring match on text or prefix match on shortcut. Shortcut-prefix
        hits come first, then by usage.
        """
        normalized = (query or "").strip().lower()
        if not normalized:
            return self.top_keywords(kind)

        def shortcut_hit(keyword: Keyword) -> bool:
            return bool(keyword.shortcut) and keyword.shortcut.lower().startswith(normalized)

        matches = [
            k for k in self._keywords[kind].get_all()
            if normalized in k.text.lower() or shortcut_hit(k)
        ]
        return sorted(matches, key=lambda k: (not shortcut_hit(k),) + _ranking(k))

    # ── Calendar views ──

    def day_recap(
        self, day: DateLike, technician_ids: Iterable[str] = ()
    ) -> list[dict[str, Any]]:
        """
        Technicians working on `day` (by name), each with their interventions
        by start time. `technician_ids` narrows the technicians shown.
        """
        interventions = self.interventions_by_date(day)
        present: dict[str, None] = {}
        for intervention in interventions:
            for technician_id in intervention.technician_ids:
                present.setdefault(technician_id, None)

        technicians = sorted(
            (t for t in map(self._technicians.get, present) if t is not None),
            key=lambda t: (t.name.lower(), t.id),
        )
        wanted = set(technician_ids)
        if wanted:
            technicians = [t for t in technicians if t.id in wanted]

        return [
            {
                "technician": technician,
                "interventions": sorted(
                    (i for i in interventions if technician.id in i.technician_ids),
                    key=lambda i: i.start_time,
                ),
            }
            for technician in technicians
        ]

    def technician_week(
        self, anchor: DateLike, technician_filter: Iterable[str] = ()
    ) -> list[dict[str, Any]]:
        """
        One row per active technician (narrowed by the filter), with the
        interventions they are assigned to on each weekday.
        """
        days = week_days(anchor)
        by_day = {day: self.interventions_by_date(day) for day in days}
        selected = set(technician_filter)
        technicians = [
            t for t in self.active_technicians() if not selected or t.id in selected
        ]
        return [
            {
                "technician": technician,
                "days": {
                    day: [i for i in by_day[day] if technician.id in i.technician_ids]
                    for day in days
                },
            }
            for technician in technicians
        ]
