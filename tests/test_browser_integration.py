"""End-to-end checks against a real Chromium.

Skipped when Playwright's browser cannot be launched (e.g. CI without
``playwright install chromium``).  Run with ``pytest -m browser``.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from a11ybot.audit.focus_trap import FocusTrapSimulator
from a11ybot.audit.heuristics import HeuristicSuggestionEngine
from a11ybot.errors import BrowserLaunchError
from a11ybot.orchestrator import AuditOrchestrator
from a11ybot.schemas.focus_trap import FocusTrapIssueKind as Kind
from a11ybot.shared.browser import BrowserSession

pytestmark = pytest.mark.browser

TRAPPED_MODAL = """
<main inert><a href="#">Background link</a></main>
<div id="dlg" role="dialog" aria-modal="true" aria-label="Sign in">
  <input id="user" type="text">
  <button id="go">Go</button>
</div>
<script>
  const dlg = document.getElementById('dlg');
  dlg.addEventListener('keydown', (e) => {
    if (e.key !== 'Tab') return;
    const items = dlg.querySelectorAll('input, button');
    const first = items[0], last = items[items.length - 1];
    if (e.shiftKey && document.activeElement === first) { e.preventDefault(); last.focus(); }
    else if (!e.shiftKey && document.activeElement === last) { e.preventDefault(); first.focus(); }
  });
</script>
"""

LEAKY_MODAL = """
<div id="dlg" role="dialog" aria-modal="true" aria-label="Newsletter">
  <button>Subscribe</button>
</div>
<a href="#">Footer link</a>
"""


async def _with_page(fn):
    session = BrowserSession()
    try:
        try:
            await session.get_browser()
        except BrowserLaunchError as exc:
            pytest.skip(f"Chromium unavailable: {exc}")
        return await session.with_page(fn)
    finally:
        await session.close()


HEURISTICS_MARKUP = """
<img src="empty.jpg" alt="">
<img src="missing.jpg">
<img src="upper.jpg" alt="IMG2">
<img src="photo.jpg" alt="photograph">
<img src="team.jpg" alt="The team at the spring offsite">
<div role="fancy">custom widget</div>
<nav role="navigation">nav</nav>
<ul role="list"><li role="listitem">item</li></ul>
<span style="color: rgb(128, 128, 128); background-color: rgb(255, 255, 255)">gray on white</span>
<em style="color: rgb(0, 0, 0); background-color: rgb(255, 255, 255)">black on white</em>
<strong style="color: rgba(128, 128, 128, 0.5); background-color: rgb(255, 255, 255)">translucent text</strong>
<small style="color: rgb(200, 200, 200); background-color: rgba(255, 255, 255, 0.5)">translucent background</small>
"""


async def _collect_heuristics(markup: str, **kwargs):
    async def run(page):
        await page.set_content(markup)
        return await HeuristicSuggestionEngine(**kwargs).collect(page)

    return await _with_page(run)


@pytest.mark.asyncio
async def test_alt_text_rules() -> None:
    suggestions = await _collect_heuristics(HEURISTICS_MARKUP)

    assert suggestions.alt_text == [
        "Image #1: alt='' is not descriptive. Add meaningful alt text (source: 'empty.jpg').",
        "Image #2: alt='' is not descriptive. Add meaningful alt text (source: 'missing.jpg').",
        "Image #3: alt='IMG2' is not descriptive. Add meaningful alt text (source: 'upper.jpg').",
    ]


@pytest.mark.asyncio
async def test_only_unrecognized_roles_flagged() -> None:
    suggestions = await _collect_heuristics(HEURISTICS_MARKUP)
    assert suggestions.aria == [
        "Non-standard ARIA role 'fancy' on <div>: make sure it is correct and necessary.",
    ]


@pytest.mark.asyncio
async def test_role_allow_list_is_configurable() -> None:
    suggestions = await _collect_heuristics(HEURISTICS_MARKUP, recognized_roles=["fancy", "navigation"])
    assert [m.split("'")[1] for m in suggestions.aria] == ["list", "listitem"]


@pytest.mark.asyncio
async def test_contrast_rules() -> None:
    suggestions = await _collect_heuristics(HEURISTICS_MARKUP)

    # black on white passes, translucent pairs are skipped
    assert [c.tag for c in suggestions.contrast] == ["span"]
    finding = suggestions.contrast[0]
    assert finding.ratio == pytest.approx(3.95, abs=0.01)
    assert finding.fg == "rgb(128, 128, 128)"
    assert finding.bg == "rgb(255, 255, 255)"


@pytest.mark.asyncio
async def test_contrast_threshold_is_passed_to_page() -> None:
    suggestions = await _collect_heuristics(HEURISTICS_MARKUP, contrast_threshold=3.0)
    assert suggestions.contrast == []


@pytest.mark.asyncio
async def test_focus_trap_passes_on_trapped_modal() -> None:
    async def run(page):
        await page.set_content(TRAPPED_MODAL)
        return await FocusTrapSimulator().run(page)

    issues = await _with_page(run)
    assert [i.kind for i in issues] == [Kind.PASS]


@pytest.mark.asyncio
async def test_focus_trap_reports_escape() -> None:
    async def run(page):
        await page.set_content(LEAKY_MODAL)
        return await FocusTrapSimulator().run(page)

    kinds = [i.kind for i in await _with_page(run)]
    assert Kind.ESCAPED in kinds
    assert Kind.BACKGROUND_NOT_INERT in kinds
    assert Kind.NO_FORWARD_WRAP not in kinds


@pytest.mark.asyncio
async def test_focus_trap_without_modal() -> None:
    async def run(page):
        await page.set_content("<p>No dialogs here</p>")
        return await FocusTrapSimulator().run(page)

    assert [i.kind for i in await _with_page(run)] == [Kind.NOT_FOUND]


@pytest.mark.asyncio
async def test_render_artifact_writes_pdf(tmp_path: Path) -> None:
    session = BrowserSession()
    try:
        try:
            await session.get_browser()
        except BrowserLaunchError as exc:
            pytest.skip(f"Chromium unavailable: {exc}")
        target = tmp_path / "report.pdf"
        await AuditOrchestrator(session).render_artifact("<h1>Report</h1>", target)
    finally:
        await session.close()

    assert target.read_bytes().startswith(b"%PDF")
