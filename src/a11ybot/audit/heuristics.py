"""Heuristic suggestion engine — alt text, ARIA roles and color contrast.

All three checks run in a single ``page.evaluate`` round trip.  The script is
self-contained: it sees nothing from Python except the argument object, so the
contrast math is duplicated in :mod:`a11ybot.audit.contrast`.
"""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Page

from a11ybot.errors import EvaluationError
from a11ybot.schemas.config import DEFAULT_RECOGNIZED_ROLES
from a11ybot.schemas.suggestions import ContrastFinding, SuggestionList

logger = logging.getLogger(__name__)

HEURISTICS_SCRIPT = r"""({ roles, threshold }) => {
    const altText = [];
    const aria = [];
    const contrast = [];

    // Alt text: empty or a generic placeholder such as "image" / "photo2"
    const placeholder = /^(image|img|photo|picture)[0-9]*$/i;
    document.querySelectorAll('img').forEach((img, i) => {
        const src = img.getAttribute('src') || '';
        const alt = img.getAttribute('alt') || '';
        if (!alt || placeholder.test(alt)) {
            altText.push(
                `Image #${i + 1}: alt='${alt}' is not descriptive. ` +
                `Add meaningful alt text (source: '${src}').`
            );
        }
    });

    // ARIA roles outside the allow-list
    const allowed = new Set(roles);
    document.querySelectorAll('[role]').forEach((el) => {
        const role = el.getAttribute('role') || '';
        if (!allowed.has(role)) {
            aria.push(
                `Non-standard ARIA role '${role}' on <${el.tagName.toLowerCase()}>: ` +
                `make sure it is correct and necessary.`
            );
        }
    });

    // Contrast: opaque rgb() pairs only
    const rgbPattern = /^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([\d.]+)\s*)?\)$/i;
    function parseRGB(color) {
        const m = rgbPattern.exec((color || '').trim());
        if (!m) return null;
        if (m[4] !== undefined && parseFloat(m[4]) < 1) return null;
        const rgb = [parseInt(m[1], 10), parseInt(m[2], 10), parseInt(m[3], 10)];
        return rgb.some((c) => c > 255) ? null : rgb;
    }
    function luminance(rgb) {
        const [r, g, b] = rgb.map((v) => {
            const c = v / 255;
            return c <= 0.03928 ? c / 12.92 : Math.pow((c + 0.055) / 1.055, 2.4);
        });
        return 0.2126 * r + 0.7152 * g + 0.0722 * b;
    }
    function ratio(a, b) {
        const l1 = luminance(a);
        const l2 = luminance(b);
        return (Math.max(l1, l2) + 0.05) / (Math.min(l1, l2) + 0.05);
    }

    document.querySelectorAll('*').forEach((el) => {
        const style = window.getComputedStyle(el);
        const fg = parseRGB(style.color);
        const bg = parseRGB(style.backgroundColor);
        if (!fg || !bg) return;
        const r = ratio(fg, bg);
        if (r < threshold) {
            contrast.push({
                ratio: r,
                fg: style.color,
                bg: style.backgroundColor,
                tag: el.tagName.toLowerCase(),
            });
        }
    });

    return { altText, aria, contrast };
}"""


class HeuristicSuggestionEngine:
    """Runs the custom DOM heuristics in one atomic in-page evaluation."""

    def __init__(
        self,
        recognized_roles: list[str] | None = None,
        contrast_threshold: float = 4.5,
    ) -> None:
        self.recognized_roles = list(recognized_roles or DEFAULT_RECOGNIZED_ROLES)
        self.contrast_threshold = contrast_threshold

    async def collect(self, page: Page) -> SuggestionList:
        """Return heuristic findings; raise EvaluationError if the script throws."""
        try:
            raw = await page.evaluate(
                HEURISTICS_SCRIPT,
                {"roles": self.recognized_roles, "threshold": self.contrast_threshold},
            )
        except Exception as exc:
            raise EvaluationError("heuristics", str(exc)) from exc

        suggestions = _to_suggestions(raw)
        logger.info(
            "Heuristics: %d alt-text, %d ARIA, %d contrast findings",
            len(suggestions.alt_text), len(suggestions.aria), len(suggestions.contrast),
        )
        return suggestions


def _to_suggestions(raw: dict[str, Any]) -> SuggestionList:
    if not isinstance(raw, dict):
        raise EvaluationError("heuristics", f"unexpected script result: {type(raw).__name__}")
    return SuggestionList(
        alt_text=raw.get("altText") or [],
        aria=raw.get("aria") or [],
        contrast=[ContrastFinding(**c) for c in raw.get("contrast") or []],
    )
