"""Browser session orchestrator that drives one backend adapter."""

from __future__ import annotations

import enum
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import httpx

from .browser.base import BackendAdapter
from .browser.page import PageHandle
from .config import BrowserSettings, HeadlessBrowserType
from .errors import (
    ActionError,
    ActionErrorReason,
    LaunchError,
    NavigationError,
    SessionError,
    TeardownFault,
)
from .models import ActionResult, Coordinate
from .storage import SessionStorage

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_CONSOLE_POLL_INTERVAL = 0.1


class SessionState(str, enum.Enum):
    """Lifecycle of a browser session. ``CLOSED`` is terminal."""

    UNINITIALIZED = "uninitialized"
    LAUNCHED = "launched"
    CLOSED = "closed"


class BrowserSession:
    """Uniform action surface over a single headless browser page.

    The configured backend is fixed when the session is built. All backend work
    runs on one dedicated worker thread, so overlapping calls queue behind each
    other in submission order and never interleave on the page.
    """

    def __init__(
        self,
        settings: BrowserSettings,
        *,
        adapter_factory: Optional[Callable[[], BackendAdapter]] = None,
    ) -> None:
        self._settings = settings
        self._backend_kind = HeadlessBrowserType(settings.headless_browser_type)
        if adapter_factory is None:
            from .factory import adapter_class_for

            adapter_factory = adapter_class_for(self._backend_kind)
        self._adapter_factory = adapter_factory
        self._state = SessionState.UNINITIALIZED
        self._storage = SessionStorage(settings.storage_path, self._backend_kind.value)
        self._resources = ExitStack()
        self._adapter: Optional[BackendAdapter] = None
        self._handle: Any = None
        self._page: Optional[PageHandle] = None
        self._logs: list[str] = []
        self._mouse_position: Optional[str] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="browser-session")
        self._executor_lock = threading.Lock()
        self._executor_closed = False

    def __enter__(self) -> "BrowserSession":
        try:
            self.launch_browser()
        except BaseException:
            self.close_browser()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close_browser()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def backend_kind(self) -> HeadlessBrowserType:
        return self._backend_kind

    @property
    def settings(self) -> BrowserSettings:
        return self._settings

    @property
    def storage_dir(self) -> Optional[Path]:
        """Session-scoped working directory while launched, or one whose removal failed."""

        return self._storage.path

    # Public actions ----------------------------------------------------

    def launch_browser(self) -> None:
        """Start the backend and open the session page; no-op when already launched."""

        self._submit(self._launch)

    def navigate_to_url(self, url: str) -> ActionResult:
        return self._submit(self._navigate, url)

    def click(self, coordinate: str) -> ActionResult:
        """Click at ``"x,y"`` and report the input coordinate as the mouse position."""

        return self._submit(self._click, coordinate)

    def type(self, text: str) -> ActionResult:
        return self._submit(self._type, text)

    def scroll_down(self) -> ActionResult:
        return self._submit(self._scroll, self._settings.viewport_height)

    def scroll_up(self) -> ActionResult:
        return self._submit(self._scroll, -self._settings.viewport_height)

    def clear_logs(self) -> None:
        self._submit(self._logs.clear)

    def close_browser(self) -> None:
        """Tear down the backend and release session storage. Safe to call repeatedly."""

        with self._executor_lock:
            if self._executor_closed:
                return
            try:
                self._executor.submit(self._close).result()
            finally:
                self._executor.shutdown(wait=True)
                self._executor_closed = True

    # Worker-thread implementations -------------------------------------

    def _submit(self, fn: Callable[..., T], *args: Any) -> T:
        with self._executor_lock:
            if self._executor_closed:
                raise ActionError(ActionErrorReason.SESSION_CLOSED, "Browser session is closed")
            future = self._executor.submit(fn, *args)
        return future.result()

    def _launch(self) -> None:
        if self._state is SessionState.LAUNCHED:
            LOGGER.debug("Browser already launched; ignoring launch request")
            return
        if self._state is SessionState.CLOSED:
            raise ActionError(ActionErrorReason.SESSION_CLOSED, "Browser session is closed")
        LOGGER.info("Launching %s browser", self._backend_kind.value)
        adapter = self._adapter_factory()
        with ExitStack() as stack:
            try:
                workdir = self._storage.acquire()
            except OSError as exc:
                raise LaunchError(f"Could not create session storage: {exc}") from exc
            stack.callback(self._storage.release)
            handle = adapter.launch(self._settings, workdir)
            stack.callback(_teardown_quietly, adapter, handle)
            page = adapter.open_page(handle)
            self._resources = stack.pop_all()
        self._adapter = adapter
        self._handle = handle
        self._page = page
        self._state = SessionState.LAUNCHED

    def _navigate(self, url: str) -> ActionResult:
        adapter, page = self._require_launched()
        _validate_url(url)
        return self._perform("navigate", lambda: adapter.goto(page, url))

    def _click(self, coordinate: str) -> ActionResult:
        adapter, page = self._require_launched()
        point = Coordinate.parse(coordinate)

        def effect() -> None:
            adapter.pointer_click(page, point.x, point.y)
            self._mouse_position = point.raw

        return self._perform("click", effect)

    def _type(self, text: str) -> ActionResult:
        adapter, page = self._require_launched()
        return self._perform("type", lambda: adapter.keyboard_type(page, text))

    def _scroll(self, delta_y: int) -> ActionResult:
        adapter, page = self._require_launched()
        return self._perform("scroll", lambda: adapter.scroll(page, delta_y))

    def _perform(self, name: str, effect: Callable[[], None]) -> ActionResult:
        LOGGER.debug("Performing %s on %s browser", name, self._backend_kind.value)
        try:
            effect()
            self._settle_console()
            return self._capture()
        except SessionError:
            self._close_if_unresponsive()
            raise

    def _require_launched(self) -> tuple[BackendAdapter, PageHandle]:
        if self._state is SessionState.CLOSED:
            raise ActionError(ActionErrorReason.SESSION_CLOSED, "Browser session is closed")
        if self._state is not SessionState.LAUNCHED or self._adapter is None or self._page is None:
            raise ActionError(ActionErrorReason.NOT_LAUNCHED, "Browser has not been launched")
        return self._adapter, self._page

    def _settle_console(self) -> None:
        """Wait until no console output arrived for ``console_idle`` seconds."""

        adapter, page = self._require_launched()
        start = time.monotonic()
        deadline = start + self._settings.console_settle_timeout
        quiet_since = start
        while True:
            lines = adapter.drain_console_logs(page)
            now = time.monotonic()
            if lines:
                self._logs.extend(lines)
                quiet_since = now
            if now - quiet_since >= self._settings.console_idle or now >= deadline:
                return
            adapter.wait(page, _CONSOLE_POLL_INTERVAL)

    def _capture(self) -> ActionResult:
        adapter, page = self._require_launched()
        screenshot = adapter.screenshot(page)
        self._logs.extend(adapter.drain_console_logs(page))
        return ActionResult(
            screenshot=screenshot,
            logs="\n".join(self._logs),
            current_url=adapter.current_url(page),
            current_mouse_position=self._mouse_position,
        )

    def _close_if_unresponsive(self) -> None:
        if self._adapter is None or self._adapter.is_responsive(self._handle):
            return
        LOGGER.error("%s backend stopped responding; closing session", self._backend_kind.value)
        self._close()

    def _close(self) -> None:
        if self._state is SessionState.CLOSED:
            return
        LOGGER.info("Closing %s browser", self._backend_kind.value)
        resources, self._resources = self._resources, ExitStack()
        self._state = SessionState.CLOSED
        self._adapter = None
        self._handle = None
        self._page = None
        resources.close()


def _teardown_quietly(adapter: BackendAdapter, handle: Any) -> None:
    try:
        adapter.teardown(handle)
    except TeardownFault as exc:
        LOGGER.warning("Teardown of %s backend was incomplete: %s", adapter.kind.value, exc)
    except Exception:  # pragma: no cover - unexpected backend failure during cleanup
        LOGGER.exception("Unexpected error tearing down %s backend", adapter.kind.value)


def _validate_url(url: str) -> None:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise NavigationError(f"Malformed URL {url!r}: {exc}") from exc
    if not parsed.scheme:
        raise NavigationError(f"Malformed URL {url!r}: missing scheme")
    if parsed.scheme in {"http", "https"} and not parsed.host:
        raise NavigationError(f"Malformed URL {url!r}: missing host")
