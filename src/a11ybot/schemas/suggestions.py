"""Pydantic models for the heuristic suggestion engine output."""

from pydantic import BaseModel


class ContrastFinding(BaseModel):
    """An element whose text/background contrast falls below the threshold."""

    ratio: float
    fg: str
    bg: str
    tag: str

    @property
    def message(self) -> str:
        return (
            f"Low contrast ({self.ratio:.2f}:1) between text {self.fg} "
            f"and background {self.bg} on <{self.tag}>."
        )


class SuggestionList(BaseModel):
    """Heuristic findings grouped by category."""

    alt_text: list[str] = []
    aria: list[str] = []
    contrast: list[ContrastFinding] = []

    @property
    def total(self) -> int:
        return len(self.alt_text) + len(self.aria) + len(self.contrast)
