# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Overlap layout — pure computation, no side effects.

Given the events of one day, assign each a display column and the column
count shared by its overlap cluster, so concurrent events render side by
side (width = 100 / total_columns, left = column * width).
"""

from dataclasses import dataclass, replace
from typing import Any, Iterable, Sequence

from planning.models.domain import Intervention
from planning.utils.timeslots import time_to_minutes


@dataclass
class LayoutEvent:
    """An event span in minutes since midnight plus its layout slot."""
    start: int
    end: int
    payload: Any = None
    column: int = 0
    total_columns: int = 1


def overlaps(a: LayoutEvent, b: LayoutEvent) -> bool:
    """Strict overlap: back-to-back events (a.end == b.start) do not overlap."""
    return a.start < b.end and a.end > b.start


def assign_columns(events: Sequence[LayoutEvent]) -> list[LayoutEvent]:
    """
    Return copies of `events` sorted by start, with column/total_columns set.

    Forward pass: each event takes the smallest column not used by an
    overlapping earlier event; the cluster width is raised on those earlier
    events as it grows. Fixup pass: every event spreads the widest
    total_columns found among all events it overlaps, in place, so a width
    discovered late reaches the events placed before it.
    """
    ordered = sorted(
        (replace(e, column=0, total_columns=1) for e in events),
        key=lambda e: e.start,
    )

    for i, current in enumerate(ordered):
        overlapping = [other for other in ordered[:i] if overlaps(current, other)]
        used = {other.column for other in overlapping}
        column = 0
        while column in used:
            column += 1
        current.column = column

        total_columns = max([column] + [other.column for other in overlapping]) + 1
        current.total_columns = total_columns
        for other in overlapping:
            other.total_columns = max(other.total_columns, total_columns)

    for i, current in enumerate(ordered):
        overlapping = [
            other
            for j, other in enumerate(ordered)
            if j != i and overlaps(current, other)
        ]
        widest = max([current.total_columns] + [o.total_columns for o in overlapping])
        current.total_columns = widest
        for other in overlapping:
            other.total_columns = widest

    return ordered


def layout_day(interventions: Iterable[Intervention]) -> list[LayoutEvent]:
    """Lay out one day's interventions; each event's payload is its intervention."""
    return assign_columns(
        [
            LayoutEvent(
                start=time_to_minutes(i.start_time),
                end=time_to_minutes(i.end_time),
                payload=i,
            )
            for i in interventions
        ]
    )


def event_geometry(event: LayoutEvent) -> tuple[float, float]:
    """(left, width) in percent of the day column."""
    width = 100 / event.total_columns
    return event.column * width, width
