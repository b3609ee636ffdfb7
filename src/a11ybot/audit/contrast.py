"""WCAG contrast math.

The in-page heuristics script carries its own JavaScript copy of these
formulas (it cannot import anything); this module is the Python side used by
the ``contrast`` CLI command.  Keep the two in step.
"""

from __future__ import annotations

import re

RGB = tuple[int, int, int]

_RGB_RE = re.compile(
    r"^\s*rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([\d.]+)\s*)?\)\s*$",
    re.IGNORECASE,
)


def parse_rgb(color: str) -> RGB | None:
    """Parse a resolved CSS ``rgb()``/``rgba()`` color as opaque RGB.

    Returns None for anything else, including translucent colors
    (alpha < 1) whose effective value depends on what is behind them.
    """
    m = _RGB_RE.match(color or "")
    if not m:
        return None
    if m.group(4) is not None and float(m.group(4)) < 1:
        return None
    channels = tuple(int(m.group(i)) for i in (1, 2, 3))
    if any(c > 255 for c in channels):
        return None
    return channels  # type: ignore[return-value]


def _linearize(value: int) -> float:
    c = value / 255
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(rgb: RGB) -> float:
    r, g, b = (_linearize(v) for v in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(fg: RGB, bg: RGB) -> float:
    """Return the WCAG contrast ratio, from 1.0 (identical) to 21.0."""
    l1 = relative_luminance(fg)
    l2 = relative_luminance(bg)
    return (max(l1, l2) + 0.05) / (min(l1, l2) + 0.05)


def is_low_contrast(fg: RGB, bg: RGB, threshold: float = 4.5) -> bool:
    # No large/bold-text exemption: every pair is held to the same threshold.
    return contrast_ratio(fg, bg) < threshold
