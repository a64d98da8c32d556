"""Headless browser sessions behind interchangeable automation backends."""

from .config import BrowserSettings, HeadlessBrowserType, load_settings
from .errors import (
    ActionError,
    ActionErrorReason,
    ActionTimeout,
    BackendFault,
    LaunchError,
    NavigationError,
    SessionError,
    TeardownFault,
)
from .factory import build_session
from .models import ActionResult, Coordinate
from .session import BrowserSession, SessionState

__all__ = [
    "ActionError",
    "ActionErrorReason",
    "ActionResult",
    "ActionTimeout",
    "BackendFault",
    "BrowserSession",
    "BrowserSettings",
    "Coordinate",
    "HeadlessBrowserType",
    "LaunchError",
    "NavigationError",
    "SessionError",
    "SessionState",
    "TeardownFault",
    "build_session",
    "load_settings",
]
