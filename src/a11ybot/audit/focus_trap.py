"""Focus-trap simulator — checks keyboard focus containment in a modal dialog.

The run is a fixed sequence of states::

    NoModal (terminal)
    MetaChecked            role / aria-modal / accessible name
    FocusablesEnumerated   EmptyModal is terminal
    BackgroundChecked      siblings of the modal carry inert / aria-hidden
    InitialFocusSet
    ForwardTabWalk         stops at the first escape
    WrapCheckForward       skipped after an escape
    ShiftTabCheck          always runs
    FinalContainment
    Done                   a single ``pass`` issue when nothing was found

Findings are returned as data.  Only a broken page (Playwright error) raises.
Every element handle acquired during the run is disposed before returning.
"""

from __future__ import annotations

import json
import logging

from playwright.async_api import ElementHandle, Page

from a11ybot.errors import EvaluationError
from a11ybot.schemas.config import DEFAULT_MODAL_SELECTOR
from a11ybot.schemas.focus_trap import FocusTrapIssue, FocusTrapIssueKind, ModalMeta

logger = logging.getLogger(__name__)

Kind = FocusTrapIssueKind

# Hard ceiling on Tab presses so a pathological page cannot hang the walk.
MAX_TAB_STEPS = 50

FOCUSABLE_SELECTOR = ",".join([
    "a[href]",
    "area[href]",
    'input:not([disabled]):not([type="hidden"])',
    "select:not([disabled])",
    "textarea:not([disabled])",
    "button:not([disabled])",
    "details",
    "summary",
    '[contenteditable="true"]',
    '[tabindex]:not([tabindex^="-"])',
])

_IS_FOCUSABLE_FN = """function isFocusable(el) {
    const style = window.getComputedStyle(el);
    if (style.display === 'none' || style.visibility === 'hidden') return false;
    const rect = el.getBoundingClientRect();
    if (rect.width === 0 || rect.height === 0) return false;
    if (el.hasAttribute('disabled')) return false;
    if (el.closest('[aria-hidden="true"]') !== null) return false;
    if (el.closest('[inert]') !== null) return false;
    return true;
}"""

META_SCRIPT = """(el) => {
    const label = el.getAttribute('aria-label');
    const labelledby = el.getAttribute('aria-labelledby');
    const labelledEl = labelledby ? document.getElementById(labelledby) : null;
    const name = (label && label.trim()) || (labelledEl && labelledEl.textContent.trim()) || '';
    return {
        role: el.getAttribute('role') || '',
        ariaModal: el.getAttribute('aria-modal'),
        hasAccessibleName: name.length > 0,
    };
}"""

IS_FOCUSABLE_SCRIPT = f"""(el) => {{
    {_IS_FOCUSABLE_FN}
    return isFocusable(el);
}}"""

# Only direct children of <body> are inspected; overlays nested deeper in
# wrappers are not looked through.
BACKGROUND_INERT_SCRIPT = """(modal) => {
    const root = document.body || document.documentElement;
    const siblings = Array.from(root.children).filter(
        (n) => n !== modal && !modal.contains(n) && !n.contains(modal)
    );
    return siblings.some(
        (n) => n.hasAttribute('inert') || n.getAttribute('aria-hidden') === 'true'
    );
}"""

FOCUS_INSIDE_SCRIPT = """(modal) => {
    const active = document.activeElement;
    return !!active && modal.contains(active);
}"""

# Re-queries the focusables on every call instead of reusing handles, so a
# page that reorders or replaces elements between steps is caught.
ACTIVE_IS_SCRIPT = f"""(modal, which) => {{
    {_IS_FOCUSABLE_FN}
    const list = Array.from(modal.querySelectorAll({json.dumps(FOCUSABLE_SELECTOR)})).filter(isFocusable);
    if (list.length === 0) return false;
    const target = which === 'first' ? list[0] : list[list.length - 1];
    return document.activeElement === target;
}}"""

MESSAGES: dict[FocusTrapIssueKind, str] = {
    Kind.NOT_FOUND: 'No modal dialog found (role="dialog" or role="alertdialog").',
    Kind.EMPTY_MODAL: "The modal contains no focusable elements.",
    Kind.BACKGROUND_NOT_INERT: (
        "The background is not made non-interactive "
        '(use [inert] or aria-hidden="true" outside the modal).'
    ),
    Kind.INITIAL_FOCUS_FAILED: "Could not place initial focus inside the modal.",
    Kind.ESCAPED: "Focus escaped the modal while moving with Tab.",
    Kind.NO_FORWARD_WRAP: "Tab from the last element does not wrap to the first element of the modal.",
    Kind.NO_BACKWARD_WRAP: "Shift+Tab from the first element does not wrap to the last element of the modal.",
    Kind.FINAL_CONTAINMENT_FAILED: "Focus is not inside the modal after the navigation test.",
    Kind.PASS: (
        "Focus trap works: Tab and Shift+Tab stay inside the modal "
        "and wrap between the first and last elements."
    ),
}


def _issue(kind: FocusTrapIssueKind, message: str | None = None) -> FocusTrapIssue:
    return FocusTrapIssue(kind=kind, message=message or MESSAGES[kind])


def check_meta(meta: ModalMeta) -> list[FocusTrapIssue]:
    """Validate role, aria-modal and accessible name; one issue per failure."""
    issues = []
    if meta.role not in ("dialog", "alertdialog"):
        issues.append(_issue(
            Kind.META_PROBLEM,
            f'The modal element has an incorrect role (found: "{meta.role or "none"}").',
        ))
    if meta.aria_modal != "true":
        issues.append(_issue(Kind.META_PROBLEM, 'Set aria-modal="true" on the modal.'))
    if not meta.has_accessible_name:
        issues.append(_issue(
            Kind.META_PROBLEM,
            "The modal has no accessible name (aria-label or aria-labelledby).",
        ))
    return issues


class FocusTrapSimulator:
    """Drives the keyboard through the first modal dialog on the page."""

    def __init__(
        self,
        modal_selector: str = DEFAULT_MODAL_SELECTOR,
        max_tab_steps: int = MAX_TAB_STEPS,
    ) -> None:
        self.modal_selector = modal_selector
        self.max_tab_steps = min(max_tab_steps, MAX_TAB_STEPS)

    async def run(self, page: Page) -> list[FocusTrapIssue]:
        """Return at least one issue; raise EvaluationError if the page breaks."""
        try:
            issues = await self._simulate(page)
        except EvaluationError:
            raise
        except Exception as exc:
            raise EvaluationError("focus-trap", str(exc)) from exc

        logger.info("Focus trap: %s", ", ".join(i.kind.value for i in issues))
        return issues

    async def _simulate(self, page: Page) -> list[FocusTrapIssue]:
        modal = await page.query_selector(self.modal_selector)
        if modal is None:
            return [_issue(Kind.NOT_FOUND)]

        candidates: list[ElementHandle] = []
        try:
            raw_meta = await modal.evaluate(META_SCRIPT)
            issues = check_meta(ModalMeta(
                role=raw_meta.get("role") or "",
                aria_modal=raw_meta.get("ariaModal"),
                has_accessible_name=bool(raw_meta.get("hasAccessibleName")),
            ))

            candidates = await modal.query_selector_all(FOCUSABLE_SELECTOR)
            focusables = [h for h in candidates if await h.evaluate(IS_FOCUSABLE_SCRIPT)]
            logger.debug(
                "Modal has %d focusable elements (%d candidates)", len(focusables), len(candidates),
            )
            if not focusables:
                issues.append(_issue(Kind.EMPTY_MODAL))
                return issues

            if not await modal.evaluate(BACKGROUND_INERT_SCRIPT):
                issues.append(_issue(Kind.BACKGROUND_NOT_INERT))

            first, last = focusables[0], focusables[-1]

            await first.focus()
            if not await self._focus_inside(modal):
                issues.append(_issue(Kind.INITIAL_FOCUS_FAILED))

            escaped = await self._tab_walk(page, modal, len(focusables))
            if escaped:
                issues.append(_issue(Kind.ESCAPED))
            else:
                # After an escape the wrap result says nothing, so only
                # check it when the walk stayed inside.
                await last.focus()
                await page.keyboard.press("Tab")
                if not await modal.evaluate(ACTIVE_IS_SCRIPT, "first"):
                    issues.append(_issue(Kind.NO_FORWARD_WRAP))

            await first.focus()
            await page.keyboard.down("Shift")
            try:
                await page.keyboard.press("Tab")
            finally:
                await page.keyboard.up("Shift")
            if not await modal.evaluate(ACTIVE_IS_SCRIPT, "last"):
                issues.append(_issue(Kind.NO_BACKWARD_WRAP))

            if not await self._focus_inside(modal):
                issues.append(_issue(Kind.FINAL_CONTAINMENT_FAILED))

            if not issues:
                issues.append(_issue(Kind.PASS))
            return issues
        finally:
            for handle in candidates:
                await _dispose(handle)
            await _dispose(modal)

    async def _tab_walk(self, page: Page, modal: ElementHandle, count: int) -> bool:
        """Press Tab up to ``min(count + 3, cap)`` times; True if focus escaped."""
        steps = min(count + 3, self.max_tab_steps)
        for step in range(steps):
            await page.keyboard.press("Tab")
            if not await self._focus_inside(modal):
                logger.debug("Focus escaped after %d Tab presses", step + 1)
                return True
        return False

    async def _focus_inside(self, modal: ElementHandle) -> bool:
        return bool(await modal.evaluate(FOCUS_INSIDE_SCRIPT))


async def _dispose(handle: ElementHandle) -> None:
    try:
        await handle.dispose()
    except Exception as exc:
        logger.debug("Ignoring error while disposing handle: %s", exc)
