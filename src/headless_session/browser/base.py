"""Backend adapter abstraction shared by every automation backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar

from ..config import BrowserSettings, HeadlessBrowserType
from .page import PageHandle


class BackendAdapter(ABC):
    """Translate the generic session actions into one backend's native calls.

    Handles returned by :meth:`launch` are opaque to callers and are only ever
    passed back into the adapter that produced them.
    """

    kind: ClassVar[HeadlessBrowserType]

    @abstractmethod
    def launch(self, settings: BrowserSettings, workdir: Path) -> Any:
        """Start the backend and return a handle to it."""

    @abstractmethod
    def open_page(self, handle: Any) -> PageHandle:
        """Open the single page the session will drive."""

    @abstractmethod
    def teardown(self, handle: Any) -> None:
        """Release the backend; raise :class:`TeardownFault` on partial failure."""

    @abstractmethod
    def is_responsive(self, handle: Any) -> bool:
        """Return whether the backend can still accept commands."""

    def goto(self, page: PageHandle, url: str) -> None:
        page.goto(url)

    def pointer_click(self, page: PageHandle, x: int, y: int) -> None:
        page.click(x, y)

    def keyboard_type(self, page: PageHandle, text: str) -> None:
        page.type(text)

    def scroll(self, page: PageHandle, delta_y: int) -> None:
        page.scroll(delta_y)

    def screenshot(self, page: PageHandle) -> str:
        return page.screenshot()

    def drain_console_logs(self, page: PageHandle) -> list[str]:
        return page.drain_console_logs()

    def current_url(self, page: PageHandle) -> str:
        return page.url

    def wait(self, page: PageHandle, seconds: float) -> None:
        page.wait(seconds)
