"""Tests for Pydantic schema models — validation and round-trip serialization."""

import pytest
from pydantic import ValidationError

from a11ybot.audit.scoring import impact_counts
from a11ybot.schemas.audit import AuditResult
from a11ybot.schemas.focus_trap import FocusTrapIssue, FocusTrapIssueKind
from a11ybot.schemas.suggestions import ContrastFinding, SuggestionList
from a11ybot.schemas.violations import Impact, Violation, ViolationNode


class TestViolation:
    @pytest.mark.parametrize("raw,expected", [
        ("critical", Impact.CRITICAL),
        ("SERIOUS", Impact.SERIOUS),
        (None, Impact.UNKNOWN),
        ("", Impact.UNKNOWN),
        ("catastrophic", Impact.UNKNOWN),
        (Impact.MINOR, Impact.MINOR),
    ])
    def test_impact_coercion(self, raw, expected) -> None:
        assert Violation(id="x", impact=raw).impact is expected

    def test_frozen(self, make_violation) -> None:
        v = make_violation("minor")
        with pytest.raises(ValidationError):
            v.help = "changed"
        with pytest.raises(ValidationError):
            v.nodes[0].html = "<p>"

    def test_node_defaults(self) -> None:
        node = ViolationNode()
        assert node.selectors == ()
        assert node.failure_summary is None


class TestAuditResult:
    def test_counts_must_match_violations(self, violations) -> None:
        with pytest.raises(ValidationError, match="impact_counts sum to 0"):
            AuditResult(
                url="https://example.com",
                score=91,
                impact_counts={i: 0 for i in Impact},
                violations=violations,
            )

    def test_score_range(self) -> None:
        with pytest.raises(ValidationError):
            AuditResult(url="https://example.com", score=101, impact_counts={})

    def test_json_round_trip(self, violations) -> None:
        result = AuditResult(
            url="https://example.com",
            score=91,
            impact_counts=impact_counts(violations),
            violations=violations,
            suggestions=SuggestionList(
                aria=["Non-standard ARIA role 'fancy' on <div>: make sure it is correct and necessary."],
                contrast=[ContrastFinding(ratio=3.2, fg="rgb(1, 1, 1)", bg="rgb(0, 0, 0)", tag="span")],
            ),
            focus_trap=[FocusTrapIssue(kind=FocusTrapIssueKind.NOT_FOUND, message="No modal.")],
        )
        restored = AuditResult.model_validate_json(result.model_dump_json())

        assert restored == result
        assert restored.impact_counts[Impact.CRITICAL] == 1
        assert restored.violations[0].nodes[0].selectors == ("img.hero",)
        assert restored.total_violations == 3
        assert restored.suggestions.total == 2


class TestFocusTrapIssue:
    def test_is_pass(self) -> None:
        assert FocusTrapIssue(kind=FocusTrapIssueKind.PASS, message="ok").is_pass
        assert not FocusTrapIssue(kind=FocusTrapIssueKind.ESCAPED, message="out").is_pass
