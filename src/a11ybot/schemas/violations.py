"""Pydantic models for rule-engine (axe-core) violations."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class Impact(str, Enum):
    """Severity classification of a rule-engine violation."""

    CRITICAL = "critical"
    SERIOUS = "serious"
    MODERATE = "moderate"
    MINOR = "minor"
    UNKNOWN = "unknown"


class ViolationNode(BaseModel):
    """One DOM node affected by a violation."""

    model_config = ConfigDict(frozen=True)

    selectors: tuple[str, ...] = ()
    failure_summary: str | None = None
    html: str = ""


class Violation(BaseModel):
    """A single rule that failed, with every node it failed on."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    impact: Impact = Impact.UNKNOWN
    help: str = ""
    description: str = ""
    help_url: str = ""
    nodes: tuple[ViolationNode, ...] = ()

    @field_validator("impact", mode="before")
    @classmethod
    def coerce_impact(cls, v: object) -> object:
        # axe reports impact as null for some incomplete results
        if v is None or v == "":
            return Impact.UNKNOWN
        if isinstance(v, str) and v.lower() not in Impact._value2member_map_:
            return Impact.UNKNOWN
        return v.lower() if isinstance(v, str) else v
