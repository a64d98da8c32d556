"""LightPanda backend: a local CDP server driven over Playwright's CDP client."""

from __future__ import annotations

import logging
import shutil
import socket
import subprocess
import time
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional

from playwright.sync_api import Browser, BrowserContext, Error, Playwright, sync_playwright

from ..config import BrowserSettings, HeadlessBrowserType
from ..errors import LaunchError, TeardownFault
from .base import BackendAdapter
from .page import PageHandle

LOGGER = logging.getLogger(__name__)

_POLL_INTERVAL = 0.1
_TERMINATE_GRACE = 5


@dataclass
class LightPandaHandle:
    """LightPanda server process plus the CDP connection attached to it."""

    process: subprocess.Popen[bytes]
    log_file: IO[bytes]
    endpoint: str
    playwright: Playwright
    browser: Browser
    context: BrowserContext
    settings: BrowserSettings
    page: Optional[PageHandle] = None


class LightPandaAdapter(BackendAdapter):
    """Spawn ``lightpanda serve`` and attach to it over the Chrome DevTools Protocol."""

    kind = HeadlessBrowserType.LIGHTPANDA

    def launch(self, settings: BrowserSettings, workdir: Path) -> LightPandaHandle:
        executable = _resolve_executable(settings.lightpanda_executable)
        host = settings.lightpanda_host
        port = settings.lightpanda_port or _find_free_port(host)
        endpoint = f"ws://{host}:{port}"
        deadline = time.monotonic() + settings.launch_timeout

        with ExitStack() as stack:
            log_path = workdir / "lightpanda.log"
            try:
                log_file = stack.enter_context(log_path.open("wb"))
            except OSError as exc:
                raise LaunchError(f"Could not create LightPanda log at {log_path}: {exc}") from exc
            LOGGER.debug("Launching %s serve on %s:%s", executable, host, port)
            try:
                process = subprocess.Popen(
                    [str(executable), "serve", "--host", host, "--port", str(port)],
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                )
            except OSError as exc:
                raise LaunchError(f"Could not start LightPanda at {executable}: {exc}") from exc
            stack.callback(_stop_process, process)
            _wait_for_port(process, host, port, deadline, log_path)

            try:
                playwright = sync_playwright().start()
                stack.callback(playwright.stop)
                remaining = max(deadline - time.monotonic(), _POLL_INTERVAL)
                browser = playwright.chromium.connect_over_cdp(endpoint, timeout=remaining * 1000)
                stack.callback(browser.close)
                context = browser.new_context(
                    viewport={"width": settings.viewport_width, "height": settings.viewport_height}
                )
            except Error as exc:
                raise LaunchError(f"Could not connect to LightPanda at {endpoint}: {exc.message}") from exc
            stack.pop_all()

        LOGGER.info("Connected to LightPanda at %s (pid %s)", endpoint, process.pid)
        return LightPandaHandle(
            process=process,
            log_file=log_file,
            endpoint=endpoint,
            playwright=playwright,
            browser=browser,
            context=context,
            settings=settings,
        )

    def open_page(self, handle: LightPandaHandle) -> PageHandle:
        try:
            page = handle.context.new_page()
        except Error as exc:
            raise LaunchError(f"Could not open a LightPanda page: {exc.message}") from exc
        handle.page = PageHandle(
            page,
            wait_until="load",
            navigation_timeout=handle.settings.navigation_timeout,
            action_timeout=handle.settings.action_timeout,
        )
        return handle.page

    def is_responsive(self, handle: LightPandaHandle) -> bool:
        if handle.process.poll() is not None or not handle.browser.is_connected():
            return False
        return handle.page is None or handle.page.is_responsive()

    def teardown(self, handle: LightPandaHandle) -> None:
        LOGGER.debug("Stopping LightPanda at %s", handle.endpoint)
        failures: list[str] = []
        for label, close in (
            ("context", handle.context.close),
            ("browser", handle.browser.close),
            ("playwright", handle.playwright.stop),
        ):
            try:
                close()
            except Error as exc:
                failures.append(f"{label}: {exc.message}")
        handle.page = None
        _stop_process(handle.process)
        handle.log_file.close()
        if failures:
            raise TeardownFault("Failed to close LightPanda cleanly: " + "; ".join(failures))


def _resolve_executable(configured: Optional[Path]) -> Path:
    if configured is not None:
        if not configured.is_file():
            raise LaunchError(f"LightPanda executable not found at {configured}")
        return configured
    found = shutil.which("lightpanda")
    if found is None:
        raise LaunchError("LightPanda executable not found on PATH")
    return Path(found)


def _find_free_port(host: str) -> int:
    sock = socket.socket()
    sock.bind((host, 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def _wait_for_port(
    process: subprocess.Popen[bytes],
    host: str,
    port: int,
    deadline: float,
    log_path: Path,
) -> None:
    while True:
        code = process.poll()
        if code is not None:
            output = log_path.read_text(errors="replace").strip()
            raise LaunchError(f"LightPanda exited with code {code} before accepting connections: {output}")
        try:
            with socket.create_connection((host, port), timeout=_POLL_INTERVAL):
                return
        except OSError:
            pass
        if time.monotonic() >= deadline:
            raise LaunchError(f"LightPanda did not accept connections on {host}:{port} in time")
        time.sleep(_POLL_INTERVAL)


def _stop_process(process: subprocess.Popen[bytes]) -> None:
    if process.poll() is not None:
        return
    LOGGER.debug("Terminating LightPanda process %s", process.pid)
    process.terminate()
    try:
        process.wait(timeout=_TERMINATE_GRACE)
    except subprocess.TimeoutExpired:  # pragma: no cover - process ignoring SIGTERM
        process.kill()
        process.wait()
