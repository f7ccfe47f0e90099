# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Technician color palette and contrast helpers.
Pure functions — no state.
"""

import re
from collections import Counter
from typing import Iterable, Optional

# Declaration order matters: it breaks ties in least_used_color().
TECHNICIAN_COLORS: tuple[tuple[str, str], ...] = (
    ("#E53935", "Rouge"),
    ("#D81B60", "Rose"),
    ("#8E24AA", "Violet"),
    ("#3949AB", "Indigo"),
    ("#1E88E5", "Bleu"),
    ("#00897B", "Teal"),
    ("#43A047", "Vert"),
    ("#FDD835", "Jaune"),
    ("#FB8C00", "Orange"),
    ("#6D4C41", "Marron"),
)

PALETTE: tuple[str, ...] = tuple(hex_value for hex_value, _ in TECHNICIAN_COLORS)

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def normalize_color(color: Optional[str]) -> Optional[str]:
    """Return the palette spelling of `color`, or None if it is not a palette color."""
    if not isinstance(color, str) or not color:
        return None
    candidate = color.strip().upper()
    return candidate if candidate in PALETTE else None


def is_valid_palette_color(color: Optional[str]) -> bool:
    return normalize_color(color) is not None


def auto_color(index: int) -> str:
    """Positional palette color, wrapping around after ten."""
    return PALETTE[index % len(PALETTE)]


def least_used_color(existing_colors: Iterable[str]) -> str:
    """Palette color used by the fewest technicians; ties go to palette order."""
    counts = Counter(normalize_color(c) for c in existing_colors)
    return min(PALETTE, key=lambda hex_value: (counts[hex_value], PALETTE.index(hex_value)))


def hex_to_rgb(hex_value: str) -> Optional[tuple[int, int, int]]:
    match = _HEX_RE.match(hex_value)
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())


def relative_luminance(hex_value: str) -> float:
    """WCAG relative luminance; 0 for unparseable input."""
    rgb = hex_to_rgb(hex_value)
    if rgb is None:
        return 0.0

    def channel(c: int) -> float:
        srgb = c / 255
        return srgb / 12.92 if srgb <= 0.03928 else ((srgb + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(c) for c in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_text_color(background: str) -> str:
    """Text color ("black" or "white") that reads best on `background`."""
    return "black" if relative_luminance(background) > 0.4 else "white"


def lighter_color(hex_value: str, factor: float = 0.85) -> str:
    """Blend toward white by `factor` (0 = unchanged, 1 = white)."""
    rgb = hex_to_rgb(hex_value)
    if rgb is None:
        return hex_value
    r, g, b = (int(c + (255 - c) * factor + 0.5) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"
