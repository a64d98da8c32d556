"""Chromium backend driven through Playwright."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from playwright.sync_api import BrowserContext, Error, Playwright, sync_playwright

from ..config import BrowserSettings, HeadlessBrowserType
from ..errors import LaunchError, TeardownFault
from .base import BackendAdapter
from .page import PageHandle

LOGGER = logging.getLogger(__name__)


@dataclass
class PuppeteerHandle:
    """Running Chromium instance owned by one session."""

    playwright: Playwright
    context: BrowserContext
    settings: BrowserSettings
    page: Optional[PageHandle] = None


class PuppeteerAdapter(BackendAdapter):
    """Launch a bundled (or configured) Chromium with a session-scoped profile."""

    kind = HeadlessBrowserType.PUPPETEER

    def launch(self, settings: BrowserSettings, workdir: Path) -> PuppeteerHandle:
        LOGGER.debug("Starting Chromium with profile under %s", workdir)
        user_data_dir = workdir / "profile"
        try:
            user_data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LaunchError(f"Could not create Chromium profile at {user_data_dir}: {exc}") from exc
        try:
            playwright = sync_playwright().start()
        except Error as exc:
            raise LaunchError(f"Could not start the Playwright driver: {exc.message}") from exc
        executable: Optional[Path] = settings.chromium_executable
        try:
            context = playwright.chromium.launch_persistent_context(
                str(user_data_dir),
                headless=True,
                args=list(settings.chromium_args),
                executable_path=str(executable) if executable else None,
                viewport={"width": settings.viewport_width, "height": settings.viewport_height},
                timeout=settings.launch_timeout * 1000,
            )
        except Error as exc:
            playwright.stop()
            raise LaunchError(f"Could not launch Chromium: {exc.message}") from exc
        return PuppeteerHandle(playwright=playwright, context=context, settings=settings)

    def open_page(self, handle: PuppeteerHandle) -> PageHandle:
        try:
            pages = handle.context.pages
            page = pages[0] if pages else handle.context.new_page()
        except Error as exc:
            raise LaunchError(f"Could not open a Chromium page: {exc.message}") from exc
        handle.page = PageHandle(
            page,
            wait_until="networkidle",
            navigation_timeout=handle.settings.navigation_timeout,
            action_timeout=handle.settings.action_timeout,
        )
        return handle.page

    def is_responsive(self, handle: PuppeteerHandle) -> bool:
        return handle.page is not None and handle.page.is_responsive()

    def teardown(self, handle: PuppeteerHandle) -> None:
        LOGGER.debug("Stopping Chromium")
        try:
            handle.context.close()
        except Error as exc:
            raise TeardownFault(f"Failed to close Chromium: {exc.message}") from exc
        finally:
            handle.page = None
            handle.playwright.stop()
