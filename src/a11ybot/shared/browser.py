"""Playwright browser session — one shared Chromium, pages leased per task."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from types import TracebackType
from typing import TypeVar

from playwright.async_api import Browser, Page, Playwright, async_playwright

from a11ybot.errors import BrowserLaunchError, PageCreationError
from a11ybot.schemas.config import BrowserConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

Launcher = Callable[[], Awaitable[Browser]]
"""Signature: async () -> Browser.  Replaces the Playwright launch in tests."""

# Signal handlers are process-wide, so the hook is installed at most once
# no matter how many sessions exist.
_shutdown_hook_installed = False


class BrowserSession:
    """Owns a single Chromium instance, launched lazily on first use.

    Usage::

        async with BrowserSession() as session:
            title = await session.with_page(lambda page: page.title())

            async with session.page() as page:
                await page.goto("https://example.com")

    Concurrent first callers share one pending launch (single-flight), so the
    browser is never launched twice.  A failed launch is not cached; the next
    call tries again.
    """

    def __init__(
        self,
        config: BrowserConfig | None = None,
        *,
        launcher: Launcher | None = None,
    ) -> None:
        self.config = config or BrowserConfig()
        self._launcher = launcher
        self._pw: Playwright | None = None
        self._browser: Browser | None = None
        self._launch_task: asyncio.Task[Browser] | None = None
        self._exit: Callable[[int], object] = os._exit
        self._terminate_task: asyncio.Task[None] | None = None

    async def __aenter__(self) -> "BrowserSession":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def launched(self) -> bool:
        return self._browser is not None

    # ------------------------------------------------------------------
    # Launch
    # ------------------------------------------------------------------

    async def get_browser(self) -> Browser:
        """Return the shared browser, launching it on first use."""
        if self._browser is not None:
            return self._browser

        task = self._launch_task
        if task is None:
            task = asyncio.ensure_future(self._launch())
            self._launch_task = task

        try:
            # shield: one cancelled waiter must not cancel the launch the
            # other waiters are sharing
            browser = await asyncio.shield(task)
        except Exception as exc:
            if self._launch_task is task:
                self._launch_task = None
            if isinstance(exc, BrowserLaunchError):
                raise
            raise BrowserLaunchError(f"Could not launch browser: {exc}") from exc

        # close() takes the task; a launch it already consumed is not cached
        if self._launch_task is task:
            self._browser = browser
            self._launch_task = None
        return browser

    async def _launch(self) -> Browser:
        if self._launcher is not None:
            browser = await self._launcher()
            logger.info("Browser launched")
            return browser

        pw = await async_playwright().start()
        try:
            browser = await pw.chromium.launch(
                headless=self.config.headless,
                args=self.config.args,
                executable_path=self.config.executable_path or None,
            )
        except Exception:
            await pw.stop()
            raise
        self._pw = pw
        logger.info("Browser launched (headless=%s)", self.config.headless)
        return browser

    # ------------------------------------------------------------------
    # Page leasing
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Lease a fresh page; it is closed on every exit path."""
        browser = await self.get_browser()
        try:
            page = await browser.new_page()
        except Exception as exc:
            raise PageCreationError(f"Could not open a new page: {exc}") from exc

        try:
            yield page
        finally:
            await _close_page(page)

    async def with_page(self, fn: Callable[[Page], Awaitable[T]]) -> T:
        """Open a page, run ``fn(page)``, close the page, return fn's result."""
        async with self.page() as page:
            return await fn(page)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the browser, waiting for an in-flight launch first.

        Returns immediately when no browser was ever launched.
        """
        task, self._launch_task = self._launch_task, None
        if task is not None and self._browser is None:
            try:
                self._browser = await task
            except Exception as exc:
                logger.debug("Pending launch failed during shutdown: %s", exc)

        browser, self._browser = self._browser, None
        if browser is not None:
            try:
                await browser.close()
            except Exception as exc:
                logger.warning("Error closing browser: %s", exc)
            logger.info("Browser closed")

        pw, self._pw = self._pw, None
        if pw is not None:
            await pw.stop()

    def install_shutdown_hook(
        self,
        *,
        exit: Callable[[int], object] = os._exit,
    ) -> bool:
        """Close the browser and exit on SIGINT/SIGTERM.

        Installed at most once per process; returns False if a hook was
        already installed.  Must be called from inside the running loop.
        """
        global _shutdown_hook_installed
        if _shutdown_hook_installed:
            return False
        _shutdown_hook_installed = True

        loop = asyncio.get_running_loop()
        self._exit = exit

        def _on_signal(signum: int) -> None:
            self._terminate_task = loop.create_task(self._terminate(signum))

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, _on_signal, sig)
            except (NotImplementedError, RuntimeError):
                # Windows event loops have no add_signal_handler
                signal.signal(sig, lambda s, _f: loop.call_soon_threadsafe(_on_signal, s))
        return True

    async def _terminate(self, signum: int) -> None:
        logger.info("Received signal %d, closing browser", signum)
        try:
            await self.close()
        finally:
            self._exit(0)


async def _close_page(page: Page) -> None:
    try:
        await page.close()
    except Exception as exc:
        # Already closed / browser gone: nothing left to release.
        logger.debug("Ignoring error while closing page: %s", exc)
