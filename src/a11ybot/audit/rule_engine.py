"""Rule-engine adapter — runs axe-core in the page and normalizes its output."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from playwright.async_api import Page

from a11ybot.errors import EvaluationError
from a11ybot.schemas.config import AXE_CDN_URL
from a11ybot.schemas.violations import Violation, ViolationNode

logger = logging.getLogger(__name__)

# Only the fields we keep cross the page boundary; full axe results carry
# passes/incomplete/inapplicable too and can be megabytes.
_AXE_RUN_SCRIPT = """async (options) => {
    const results = await axe.run(document, options);
    return results.violations.map(v => ({
        id: v.id,
        impact: v.impact,
        help: v.help,
        description: v.description,
        helpUrl: v.helpUrl,
        nodes: v.nodes.map(n => ({
            target: n.target,
            failureSummary: n.failureSummary,
            html: n.html,
        })),
    }));
}"""

_AXE_LOAD_TIMEOUT_MS = 10_000


class RuleEngine(Protocol):
    """The structured rule engine capability: one call per audit."""

    async def analyze(self, page: Page) -> list[Violation]: ...


class AxeRuleEngine:
    """Injects axe-core into the page and runs it once."""

    def __init__(
        self,
        source_url: str = AXE_CDN_URL,
        *,
        script_path: str = "",
        tags: list[str] | None = None,
    ) -> None:
        self.source_url = source_url
        self.script_path = script_path
        self.tags = tags or []

    async def analyze(self, page: Page) -> list[Violation]:
        try:
            if self.script_path:
                await page.add_script_tag(path=self.script_path)
            else:
                await page.add_script_tag(url=self.source_url)
            await page.wait_for_function("typeof axe !== 'undefined'", timeout=_AXE_LOAD_TIMEOUT_MS)
            raw = await page.evaluate(_AXE_RUN_SCRIPT, self._run_options())
        except Exception as exc:
            raise EvaluationError("rule-engine", str(exc)) from exc

        violations = normalize_violations(raw)
        logger.info("axe-core reported %d violations", len(violations))
        return violations

    def _run_options(self) -> dict[str, Any]:
        if self.tags:
            return {"runOnly": {"type": "tag", "values": self.tags}}
        return {}


def normalize_violations(raw: list[dict[str, Any]] | None) -> list[Violation]:
    """Convert axe's native violation shape into ``Violation`` models."""
    return [
        Violation(
            id=v.get("id") or "",
            impact=v.get("impact"),
            help=v.get("help") or "",
            description=v.get("description") or "",
            help_url=v.get("helpUrl") or "",
            nodes=tuple(
                ViolationNode(
                    selectors=tuple(_flatten_target(n.get("target") or [])),
                    failure_summary=n.get("failureSummary") or None,
                    html=n.get("html") or "",
                )
                for n in v.get("nodes") or []
            ),
        )
        for v in raw or []
    ]


def _flatten_target(target: list[Any]) -> list[str]:
    # Targets inside iframes / shadow roots arrive as nested selector lists.
    selectors = []
    for part in target:
        if isinstance(part, list):
            selectors.append(" >> ".join(str(p) for p in part))
        else:
            selectors.append(str(part))
    return selectors
