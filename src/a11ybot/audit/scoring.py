"""Score calculator — maps rule-engine violations to a 0-100 score."""

from __future__ import annotations

from collections.abc import Iterable

from a11ybot.schemas.violations import Impact, Violation

# Penalty per violation (not per affected node).
IMPACT_WEIGHTS: dict[Impact, int] = {
    Impact.CRITICAL: 5,
    Impact.SERIOUS: 3,
    Impact.MODERATE: 2,
    Impact.MINOR: 1,
    Impact.UNKNOWN: 1,
}

MAX_SCORE = 100


def score(violations: Iterable[Violation]) -> int:
    """Return ``max(0, 100 - total penalty)``; 100 for no violations."""
    penalty = sum(IMPACT_WEIGHTS.get(v.impact, 1) for v in violations)
    return max(0, MAX_SCORE - penalty)


def impact_counts(violations: Iterable[Violation]) -> dict[Impact, int]:
    """Count violations per impact; every impact key is present."""
    counts = {impact: 0 for impact in Impact}
    for v in violations:
        counts[v.impact] += 1
    return counts
