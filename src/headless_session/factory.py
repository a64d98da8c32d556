"""Factories for backend adapters and sessions."""

from __future__ import annotations

from typing import Optional

from .browser.base import BackendAdapter
from .browser.lightpanda import LightPandaAdapter
from .browser.puppeteer import PuppeteerAdapter
from .config import BrowserSettings, HeadlessBrowserType, load_settings
from .session import BrowserSession

ADAPTERS: dict[HeadlessBrowserType, type[BackendAdapter]] = {
    HeadlessBrowserType.PUPPETEER: PuppeteerAdapter,
    HeadlessBrowserType.LIGHTPANDA: LightPandaAdapter,
}


def adapter_class_for(kind: HeadlessBrowserType | str) -> type[BackendAdapter]:
    try:
        return ADAPTERS[HeadlessBrowserType(kind)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unsupported headless browser type: {kind}") from exc


def build_session(settings: Optional[BrowserSettings] = None) -> BrowserSession:
    settings = settings or load_settings()
    return BrowserSession(settings, adapter_factory=adapter_class_for(settings.headless_browser_type))
