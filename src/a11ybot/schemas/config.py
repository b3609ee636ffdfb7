"""Configuration schema — validates a11ybot.yml."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]

AXE_CDN_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"

DEFAULT_RECOGNIZED_ROLES = [
    "button", "navigation", "main", "dialog", "alert", "checkbox", "tab",
    "tooltip", "link", "list", "listitem", "grid", "gridcell", "row", "table",
    "banner", "contentinfo", "complementary",
]

DEFAULT_MODAL_SELECTOR = '[role="dialog"], [role="alertdialog"]'


class BrowserConfig(BaseModel):
    """Chromium launch options."""

    headless: bool = True
    args: list[str] = DEFAULT_BROWSER_ARGS
    executable_path: str = ""  # empty = Playwright's bundled Chromium


class PdfMargins(BaseModel):
    top: str = "18mm"
    right: str = "14mm"
    bottom: str = "18mm"
    left: str = "14mm"


class PdfConfig(BaseModel):
    """Report artifact page setup."""

    format: str = "A4"
    print_background: bool = True
    margin: PdfMargins = PdfMargins()


class AuditConfig(BaseModel):
    """Top-level configuration loaded from a11ybot.yml.

    Every field has a default, so an empty file (or no file) is valid.
    """

    browser: BrowserConfig = BrowserConfig()

    # Navigation
    navigation_timeout_ms: int = Field(60_000, gt=0, le=60_000)  # may be lowered, never raised
    wait_until: Literal["load", "domcontentloaded", "networkidle"] = "networkidle"

    # Rule engine — a local script path wins over the CDN URL
    axe_source_url: str = AXE_CDN_URL
    axe_script_path: str = ""
    axe_tags: list[str] = []  # e.g. ["wcag2a", "wcag2aa"]; empty = axe defaults

    # Heuristics
    recognized_roles: list[str] = DEFAULT_RECOGNIZED_ROLES
    contrast_threshold: float = Field(4.5, gt=1.0, le=21.0)

    # Focus trap
    modal_selector: str = DEFAULT_MODAL_SELECTOR
    max_tab_steps: int = Field(50, ge=1, le=50)

    # Output
    pdf: PdfConfig = PdfConfig()
    output_directory: str = "./reports"

    @field_validator("recognized_roles")
    @classmethod
    def normalize_roles(cls, v: list[str]) -> list[str]:
        roles = [r.strip().lower() for r in v if r and r.strip()]
        if not roles:
            raise ValueError("recognized_roles must list at least one role")
        return roles
