# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Time-of-day helpers for the scheduling grid.

Times are "HH:MM" strings. The operating window and slot size come from
settings (OPERATING_WINDOW_START / OPERATING_WINDOW_END / SLOT_MINUTES);
every helper that needs them reads them from there unless told otherwise.
"""

import time
from typing import Optional

from planning.core.config import settings


def now_ms() -> int:
    """Current time as epoch milliseconds (record timestamps)."""
    return int(time.time() * 1000)


def time_to_minutes(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight. Raises ValueError."""
    hours, sep, minutes = value.strip().partition(":")
    if not sep:
        raise ValueError(f"Invalid time of day: {value!r}")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def _window(
    window_start: Optional[str], window_end: Optional[str]
) -> tuple[int, int]:
    start = time_to_minutes(window_start or settings.OPERATING_WINDOW_START)
    end = time_to_minutes(window_end or settings.OPERATING_WINDOW_END)
    return start, end


def generate_time_slots(
    window_start: Optional[str] = None,
    window_end: Optional[str] = None,
    slot_minutes: Optional[int] = None,
) -> list[str]:
    """Every slot label from the window start to the window end, inclusive."""
    start, end = _window(window_start, window_end)
    step = slot_minutes or settings.SLOT_MINUTES
    return [minutes_to_time(m) for m in range(start, end + 1, step)]


def round_to_nearest_slot(
    value: str,
    window_start: Optional[str] = None,
    window_end: Optional[str] = None,
    slot_minutes: Optional[int] = None,
) -> str:
    """
    Round to the nearest slot boundary (half-up: 08:15 -> 08:30), then
    clamp into the operating window.
    """
    step = slot_minutes or settings.SLOT_MINUTES
    minutes = time_to_minutes(value)
    rounded = (minutes + step // 2) // step * step
    start, end = _window(window_start, window_end)
    return minutes_to_time(min(max(rounded, start), end))


def is_valid_range(start: str, end: str) -> bool:
    """True when end is strictly after start."""
    return time_to_minutes(end) > time_to_minutes(start)


def is_slot_time(
    value: str,
    window_start: Optional[str] = None,
    window_end: Optional[str] = None,
) -> bool:
    """True when `value` is a slot boundary inside the operating window."""
    minutes = time_to_minutes(value)
    start, end = _window(window_start, window_end)
    return start <= minutes <= end and (minutes - start) % settings.SLOT_MINUTES == 0


def format_time_range(start: str, end: str) -> str:
    return f"{start} - {end}"


def slot_index(value: str, window_start: Optional[str] = None) -> float:
    """Position of a time in slots from the window start (fractional if off-grid)."""
    origin = time_to_minutes(window_start or settings.OPERATING_WINDOW_START)
    return (time_to_minutes(value) - origin) / settings.SLOT_MINUTES


def duration_in_slots(start: str, end: str) -> float:
    """Height of an event in slots."""
    return slot_index(end) - slot_index(start)
