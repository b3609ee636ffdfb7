"""Error taxonomy for the audit engine.

Every error carries a stable ``kind`` string so callers (CLI, an HTTP layer)
can map failures without matching on class names.  Focus-trap findings such
as "no modal" or "focus escaped" are *not* errors; they are returned as data.
"""

from __future__ import annotations


class AuditError(Exception):
    """Base class for all audit engine failures."""

    kind = "audit-error"


# ── Input validation (raised before any browser work) ──────────────


class InputValidationError(AuditError):
    kind = "invalid-input"


class InvalidURLError(InputValidationError):
    kind = "invalid-url"

    def __init__(self, url: object) -> None:
        super().__init__(f"Missing or invalid url: {url!r} (expected http:// or https://)")
        self.url = url


class MissingOutputPathError(InputValidationError):
    kind = "missing-output-path"

    def __init__(self) -> None:
        super().__init__("Missing output path for the report artifact")


# ── Browser lifecycle ──────────────────────────────────────────────


class BrowserLifecycleError(AuditError):
    kind = "browser-failure"


class BrowserLaunchError(BrowserLifecycleError):
    kind = "launch-failure"


class PageCreationError(BrowserLifecycleError):
    kind = "page-failure"


class NavigationError(BrowserLifecycleError):
    kind = "navigation-failure"


class NavigationTimeoutError(NavigationError):
    kind = "navigation-timeout"

    def __init__(self, url: str, timeout_ms: int) -> None:
        super().__init__(f"Timed out after {timeout_ms / 1000:.0f}s loading {url}")
        self.url = url
        self.timeout_ms = timeout_ms


# ── Evaluation / rendering ─────────────────────────────────────────


class EvaluationError(AuditError):
    """An in-page step failed; no partial data from that step is returned."""

    kind = "evaluation-failure"

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step} failed: {message}")
        self.step = step


class RenderError(AuditError):
    kind = "render-failure"
