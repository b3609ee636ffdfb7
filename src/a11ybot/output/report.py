"""HTML report builder — renders an AuditResult to a self-contained document."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from a11ybot.schemas.audit import AuditResult
from a11ybot.schemas.violations import Impact

_TEMPLATE_DIR = Path(__file__).parent / "templates"

_CONTROL_CHARS = re.compile(r"[\u0000-\u001f\u007f-\u009f]")

IMPACT_ORDER = [Impact.CRITICAL, Impact.SERIOUS, Impact.MODERATE, Impact.MINOR, Impact.UNKNOWN]


def strip_control(value: object) -> str:
    """Drop C0/C1 control characters; None renders as an empty string."""
    if value is None:
        return ""
    return _CONTROL_CHARS.sub("", str(value))


def _make_env() -> Environment:
    # finalize runs on every {{ }} expression before autoescape, so each
    # interpolated value is stripped *and* escaped; the template cannot forget.
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=True,
        finalize=strip_control,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def impact_badge_class(impact: Impact | str | None) -> str:
    value = impact.value if isinstance(impact, Impact) else (impact or "")
    if value in ("critical", "serious", "moderate", "minor"):
        return f"impact-{value}"
    return "impact-minor"


def render_report(result: AuditResult, *, generated_at: str | None = None) -> str:
    """Render an AuditResult into an escaped, styled HTML document."""
    env = _make_env()
    template = env.get_template("report.html")

    generated = generated_at or result.generated_at or datetime.now().isoformat(timespec="seconds")
    counts = [(impact.value, result.impact_counts.get(impact, 0)) for impact in IMPACT_ORDER]

    return template.render(
        url=result.url,
        generated_at=generated,
        score=result.score,
        total=result.total_violations,
        counts=counts,
        violations=[
            {
                "help": v.help,
                "impact": v.impact.value,
                "badge": impact_badge_class(v.impact),
                "description": v.description,
                "help_url": v.help_url,
                "nodes": [
                    {"selectors": ", ".join(n.selectors), "failure_summary": n.failure_summary}
                    for n in v.nodes
                ],
            }
            for v in result.violations
        ],
        suggestions=result.suggestions,
        contrast_messages=[c.message for c in result.suggestions.contrast],
        focus_trap=result.focus_trap,
    )
