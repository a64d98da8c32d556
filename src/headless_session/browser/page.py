"""Playwright page wrapper shared by the backend adapters."""

from __future__ import annotations

import base64
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Literal

from playwright.sync_api import ConsoleMessage, Error, Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..errors import ActionTimeout, BackendFault, NavigationError

LOGGER = logging.getLogger(__name__)

WaitUntil = Literal["domcontentloaded", "load", "networkidle"]


class PageHandle:
    """The single page driven by a session, with console output capture.

    Console messages are buffered as they are emitted and handed out in order
    by :meth:`drain_console_logs`.
    """

    def __init__(
        self,
        page: Page,
        *,
        wait_until: WaitUntil,
        navigation_timeout: float,
        action_timeout: float,
    ) -> None:
        self._page = page
        self._wait_until: WaitUntil = wait_until
        self._navigation_timeout = _to_timeout(navigation_timeout)
        self._action_timeout = _to_timeout(action_timeout)
        self._lock = threading.Lock()
        self._pending_logs: list[str] = []
        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)

    @property
    def page(self) -> Page:
        return self._page

    @property
    def url(self) -> str:
        return self._page.url

    def goto(self, url: str) -> None:
        LOGGER.debug("Navigating to %s (wait_until=%s)", url, self._wait_until)
        try:
            self._page.goto(url, wait_until=self._wait_until, timeout=self._navigation_timeout)
        except PlaywrightTimeoutError as exc:
            raise NavigationError(f"Timed out waiting for {url} to load") from exc
        except Error as exc:
            raise NavigationError(f"Failed to navigate to {url}: {exc.message}") from exc

    def click(self, x: int, y: int) -> None:
        with _translate_errors("click"):
            self._page.mouse.click(x, y)
            self._page.wait_for_load_state(self._wait_until, timeout=self._action_timeout)

    def type(self, text: str) -> None:
        with _translate_errors("type"):
            self._page.keyboard.type(text)

    def scroll(self, delta_y: int) -> None:
        with _translate_errors("scroll"):
            self._page.evaluate("(dy) => window.scrollBy({ top: dy, behavior: 'auto' })", delta_y)

    def screenshot(self) -> str:
        with _translate_errors("screenshot"):
            data = self._page.screenshot(type="png", timeout=self._action_timeout)
        return "data:image/png;base64," + base64.b64encode(data).decode("ascii")

    def wait(self, seconds: float) -> None:
        with _translate_errors("wait"):
            self._page.wait_for_timeout(seconds * 1000)

    def drain_console_logs(self) -> list[str]:
        with self._lock:
            lines, self._pending_logs = self._pending_logs, []
        return lines

    def is_closed(self) -> bool:
        return self._page.is_closed()

    def is_responsive(self) -> bool:
        """Return whether the page still evaluates script within the action timeout."""

        if self._page.is_closed():
            return False
        try:
            self._page.wait_for_function("() => true", timeout=self._action_timeout)
        except Error as exc:
            LOGGER.warning("Page did not answer a liveness check: %s", exc.message)
            return False
        return True

    # Internal helpers -------------------------------------------------

    def _on_console(self, message: ConsoleMessage) -> None:
        with self._lock:
            self._pending_logs.append(message.text)

    def _on_page_error(self, error: Error) -> None:
        with self._lock:
            self._pending_logs.append(f"[Page Error] {error}")


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    """Map Playwright failures raised by ``action`` onto session errors."""

    try:
        yield
    except PlaywrightTimeoutError as exc:
        raise ActionTimeout(f"Timed out during {action}") from exc
    except Error as exc:
        raise BackendFault(f"Backend failed during {action}: {exc.message}") from exc


def _to_timeout(timeout: float) -> float:
    return timeout * 1000
