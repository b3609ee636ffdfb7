"""Pydantic models for the focus-trap simulator."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class FocusTrapIssueKind(str, Enum):
    NOT_FOUND = "not_found"
    META_PROBLEM = "meta_problem"
    EMPTY_MODAL = "empty_modal"
    INITIAL_FOCUS_FAILED = "initial_focus_failed"
    ESCAPED = "escaped"
    NO_FORWARD_WRAP = "no_forward_wrap"
    NO_BACKWARD_WRAP = "no_backward_wrap"
    BACKGROUND_NOT_INERT = "background_not_inert"
    FINAL_CONTAINMENT_FAILED = "final_containment_failed"
    PASS = "pass"


class ModalMeta(BaseModel):
    """Role / aria-modal / accessible-name facts read from the modal element."""

    role: str = ""
    aria_modal: str | None = None
    has_accessible_name: bool = False


class FocusTrapIssue(BaseModel):
    """One finding (or the single pass marker) from a focus-trap run."""

    kind: FocusTrapIssueKind
    message: str

    @property
    def is_pass(self) -> bool:
        return self.kind is FocusTrapIssueKind.PASS
