"""Audit bundle and final result models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from a11ybot.schemas.focus_trap import FocusTrapIssue
from a11ybot.schemas.suggestions import SuggestionList
from a11ybot.schemas.violations import Impact, Violation


class RawAuditBundle(BaseModel):
    """Everything the three in-page steps produced for one page."""

    violations: list[Violation] = []
    suggestions: SuggestionList = SuggestionList()
    focus_trap: list[FocusTrapIssue] = []


class AuditResult(BaseModel):
    """The engine's return value for one audited URL."""

    url: str
    generated_at: str = Field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))
    score: int = Field(ge=0, le=100)
    impact_counts: dict[Impact, int]
    violations: list[Violation] = []
    suggestions: SuggestionList = SuggestionList()
    focus_trap: list[FocusTrapIssue] = []

    @model_validator(mode="after")
    def check_counts_match_violations(self) -> "AuditResult":
        if sum(self.impact_counts.values()) != len(self.violations):
            raise ValueError(
                f"impact_counts sum to {sum(self.impact_counts.values())} "
                f"but there are {len(self.violations)} violations"
            )
        return self

    @property
    def total_violations(self) -> int:
        return len(self.violations)
