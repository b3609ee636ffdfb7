"""Audit orchestrator — sequences the audit steps for one URL."""

from __future__ import annotations

import logging
import os
import re
import uuid
from collections.abc import Callable
from pathlib import Path

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from a11ybot.audit.focus_trap import FocusTrapSimulator
from a11ybot.audit.heuristics import HeuristicSuggestionEngine
from a11ybot.audit.rule_engine import AxeRuleEngine, RuleEngine
from a11ybot.audit.scoring import impact_counts, score
from a11ybot.errors import (
    InvalidURLError,
    MissingOutputPathError,
    NavigationError,
    NavigationTimeoutError,
    RenderError,
)
from a11ybot.output.report import render_report
from a11ybot.schemas.audit import AuditResult, RawAuditBundle
from a11ybot.schemas.config import AuditConfig
from a11ybot.shared.browser import BrowserSession

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
"""Called with a short status message as each step starts."""

_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)


def validate_url(url: object) -> str:
    """Return ``url`` if it is an http(s) URL, else raise InvalidURLError."""
    if not isinstance(url, str) or not _URL_RE.match(url.strip()):
        raise InvalidURLError(url)
    return url.strip()


class AuditOrchestrator:
    """Runs rule engine, heuristics and focus-trap checks against one page.

    The three steps share one page and run strictly in order: each observes
    (and the focus-trap walk changes) focus and DOM state the next relies on.
    """

    def __init__(
        self,
        session: BrowserSession,
        config: AuditConfig | None = None,
        *,
        rule_engine: RuleEngine | None = None,
        heuristics: HeuristicSuggestionEngine | None = None,
        focus_trap: FocusTrapSimulator | None = None,
    ) -> None:
        self.session = session
        self.config = config or AuditConfig()
        self.rule_engine = rule_engine or AxeRuleEngine(
            self.config.axe_source_url,
            script_path=self.config.axe_script_path,
            tags=self.config.axe_tags,
        )
        self.heuristics = heuristics or HeuristicSuggestionEngine(
            recognized_roles=self.config.recognized_roles,
            contrast_threshold=self.config.contrast_threshold,
        )
        self.focus_trap = focus_trap or FocusTrapSimulator(
            modal_selector=self.config.modal_selector,
            max_tab_steps=self.config.max_tab_steps,
        )

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    async def collect(self, url: str, *, on_progress: ProgressCallback | None = None) -> RawAuditBundle:
        """Load ``url`` in one page and run the three steps in order."""
        url = validate_url(url)

        def _step(msg: str) -> None:
            logger.info("[A11Y] %s", msg)
            if on_progress:
                on_progress(msg)

        async with self.session.page() as page:
            _step(f"Opening {url}")
            await self._navigate(page, url)

            _step("Running axe-core")
            violations = await self.rule_engine.analyze(page)

            _step("Collecting heuristic suggestions")
            suggestions = await self.heuristics.collect(page)

            _step("Running focus-trap checks")
            focus_trap = await self.focus_trap.run(page)

        return RawAuditBundle(violations=violations, suggestions=suggestions, focus_trap=focus_trap)

    async def run_audit(self, url: str, *, on_progress: ProgressCallback | None = None) -> AuditResult:
        """Audit ``url`` and reduce the findings to a score."""
        bundle = await self.collect(url, on_progress=on_progress)
        return build_result(url.strip(), bundle)

    async def _navigate(self, page: Page, url: str) -> None:
        timeout = self.config.navigation_timeout_ms
        try:
            await page.goto(url, wait_until=self.config.wait_until, timeout=timeout)
        except PlaywrightTimeoutError as exc:
            raise NavigationTimeoutError(url, timeout) from exc
        except Exception as exc:
            raise NavigationError(f"Could not load {url}: {exc}") from exc

    # ------------------------------------------------------------------
    # Report artifact
    # ------------------------------------------------------------------

    async def render_artifact(self, document: str, output_path: str | Path | None) -> Path:
        """Export ``document`` to a paginated PDF at ``output_path``.

        Uses its own page.  The PDF is written to a temporary sibling and
        renamed into place, so a failure never leaves a partial file at
        ``output_path``.
        """
        if not output_path or not str(output_path).strip():
            raise MissingOutputPathError()
        target = Path(output_path)
        tmp = target.with_name(f".{target.name}.{uuid.uuid4().hex}.part")
        pdf = self.config.pdf

        logger.info("[A11Y] Generating PDF at: %s", target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            async with self.session.page() as page:
                await page.set_content(document, wait_until="networkidle")
                await page.evaluate("() => document.fonts.ready.then(() => true)")
                await page.pdf(
                    path=str(tmp),
                    format=pdf.format,
                    print_background=pdf.print_background,
                    margin=pdf.margin.model_dump(),
                )
            os.replace(tmp, target)
        except Exception as exc:
            raise RenderError(f"Could not render report to {target}: {exc}") from exc
        finally:
            tmp.unlink(missing_ok=True)

        return target

    async def audit_to_pdf(
        self,
        url: str,
        output_path: str | Path | None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> AuditResult:
        """Audit ``url``, build the HTML report and export it as a PDF."""
        url = validate_url(url)
        if not output_path or not str(output_path).strip():
            raise MissingOutputPathError()

        result = await self.run_audit(url, on_progress=on_progress)

        if on_progress:
            on_progress("Building report")
        document = render_report(result)
        await self.render_artifact(document, output_path)
        return result


def build_result(url: str, bundle: RawAuditBundle) -> AuditResult:
    """Combine a raw bundle with its score and per-impact counts."""
    return AuditResult(
        url=url,
        score=score(bundle.violations),
        impact_counts=impact_counts(bundle.violations),
        violations=bundle.violations,
        suggestions=bundle.suggestions,
        focus_trap=bundle.focus_trap,
    )

