"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from a11ybot.schemas.violations import Impact, Violation, ViolationNode


class FakeBrowser:
    """Stands in for a Playwright Browser; every page is an AsyncMock."""

    def __init__(self) -> None:
        self.pages: list[AsyncMock] = []
        self.closed = False
        # Hook to tweak each page before it is handed out (e.g. make goto fail).
        self.configure_page: Callable[[AsyncMock], None] | None = None

    async def new_page(self) -> AsyncMock:
        page = AsyncMock()
        if self.configure_page:
            self.configure_page(page)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def launcher(fake_browser: FakeBrowser):
    """An async launcher that counts calls and yields once before returning."""
    calls: list[int] = []

    async def _launch() -> FakeBrowser:
        calls.append(1)
        # Give concurrent callers a chance to pile up on the pending launch.
        await asyncio.sleep(0)
        return fake_browser

    _launch.calls = calls  # type: ignore[attr-defined]
    return _launch


def make_violation(impact: str | None, help: str = "Images must have alternate text") -> Violation:
    return Violation(
        id="image-alt",
        impact=impact,
        help=help,
        description="Ensures <img> elements have alternate text",
        help_url="https://dequeuniversity.com/rules/axe/4.10/image-alt",
        nodes=(ViolationNode(selectors=("img.hero",), failure_summary="Fix any of the following"),),
    )


@pytest.fixture(name="make_violation")
def make_violation_fixture():
    return make_violation


@pytest.fixture
def violations() -> list[Violation]:
    return [make_violation(i.value) for i in (Impact.CRITICAL, Impact.SERIOUS, Impact.MINOR)]


@pytest.fixture
def tmp_config(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    cfg = tmp_path / "a11ybot.yml"
    cfg.write_text(
        """\
navigation_timeout_ms: 30000
axe_tags:
  - "wcag2a"
  - "wcag2aa"
output_directory: "{out}"
""".format(out=str(tmp_path / "reports"))
    )
    return cfg
