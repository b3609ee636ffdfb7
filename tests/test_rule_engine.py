"""Tests for the axe-core rule engine adapter."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from a11ybot.audit.rule_engine import AxeRuleEngine, normalize_violations
from a11ybot.errors import EvaluationError
from a11ybot.schemas.config import AXE_CDN_URL
from a11ybot.schemas.violations import Impact

SAMPLE_AXE = [
    {
        "id": "image-alt",
        "impact": "critical",
        "help": "Images must have alternate text",
        "description": "Ensures <img> elements have alternate text or a role of none or presentation",
        "helpUrl": "https://dequeuniversity.com/rules/axe/4.10/image-alt",
        "nodes": [
            {
                "target": ["img.hero"],
                "failureSummary": "Fix any of the following:\n  Element does not have an alt attribute",
                "html": '<img class="hero" src="hero.jpg">',
            },
            {"target": [["iframe#ad", "img.banner"]], "failureSummary": None, "html": "<img>"},
        ],
    },
    {
        "id": "region",
        "impact": None,
        "help": "All page content should be contained by landmarks",
        "description": "Ensures all page content is contained by landmarks",
        "helpUrl": "https://dequeuniversity.com/rules/axe/4.10/region",
        "nodes": [],
    },
]


class TestNormalize:
    def test_fields_mapped(self) -> None:
        first, _ = normalize_violations(SAMPLE_AXE)
        assert first.id == "image-alt"
        assert first.impact == Impact.CRITICAL
        assert first.help_url.endswith("image-alt")
        assert first.nodes[0].selectors == ("img.hero",)
        assert first.nodes[0].failure_summary.startswith("Fix any of the following")

    def test_null_impact_becomes_unknown(self) -> None:
        _, region = normalize_violations(SAMPLE_AXE)
        assert region.impact == Impact.UNKNOWN
        assert region.nodes == ()

    def test_nested_frame_target_is_flattened(self) -> None:
        first, _ = normalize_violations(SAMPLE_AXE)
        node = first.nodes[1]
        assert node.selectors == ("iframe#ad >> img.banner",)
        assert node.failure_summary is None

    def test_none_is_empty(self) -> None:
        assert normalize_violations(None) == []


def _page(result=None) -> AsyncMock:
    page = AsyncMock()
    page.evaluate.return_value = SAMPLE_AXE if result is None else result
    return page


class TestAxeRuleEngine:
    @pytest.mark.asyncio
    async def test_injects_from_cdn_by_default(self) -> None:
        page = _page()
        violations = await AxeRuleEngine().analyze(page)

        page.add_script_tag.assert_awaited_once_with(url=AXE_CDN_URL)
        page.wait_for_function.assert_awaited_once()
        assert [v.id for v in violations] == ["image-alt", "region"]

    @pytest.mark.asyncio
    async def test_local_script_path_wins(self) -> None:
        page = _page()
        await AxeRuleEngine(script_path="/opt/axe/axe.min.js").analyze(page)
        page.add_script_tag.assert_awaited_once_with(path="/opt/axe/axe.min.js")

    @pytest.mark.asyncio
    async def test_no_tags_runs_axe_defaults(self) -> None:
        page = _page([])
        assert await AxeRuleEngine().analyze(page) == []
        _, options = page.evaluate.await_args.args
        assert options == {}

    @pytest.mark.asyncio
    async def test_tags_restrict_the_run(self) -> None:
        page = _page([])
        await AxeRuleEngine(tags=["wcag2a", "wcag2aa"]).analyze(page)
        _, options = page.evaluate.await_args.args
        assert options == {"runOnly": {"type": "tag", "values": ["wcag2a", "wcag2aa"]}}

    @pytest.mark.asyncio
    async def test_script_load_failure(self) -> None:
        page = _page()
        page.add_script_tag.side_effect = RuntimeError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(EvaluationError) as exc_info:
            await AxeRuleEngine().analyze(page)
        assert exc_info.value.step == "rule-engine"
        assert exc_info.value.kind == "evaluation-failure"
        page.evaluate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_axe_run_failure(self) -> None:
        page = _page()
        page.evaluate.side_effect = RuntimeError("axe.run threw")

        with pytest.raises(EvaluationError, match="axe.run threw"):
            await AxeRuleEngine().analyze(page)
