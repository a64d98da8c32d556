"""Errors raised by browser sessions and their backend adapters."""

from __future__ import annotations

import enum


class SessionError(RuntimeError):
    """Base class for every failure reported by a browser session."""


class LaunchError(SessionError):
    """Raised when the backend process or its control connection cannot be established."""


class NavigationError(SessionError):
    """Raised when a URL is malformed, unreachable or never settles."""


class ActionErrorReason(str, enum.Enum):
    """Why an action was rejected before reaching the backend."""

    INVALID_COORDINATE = "invalid_coordinate"
    NOT_LAUNCHED = "not_launched"
    SESSION_CLOSED = "session_closed"


class ActionError(SessionError):
    """Raised for invalid action input or an action issued in the wrong state."""

    def __init__(self, reason: ActionErrorReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class ActionTimeout(SessionError):
    """Raised when an action's underlying wait exceeds its bound."""


class BackendFault(SessionError):
    """Raised when the backend fails unexpectedly while executing an action."""


class TeardownFault(SessionError):
    """Raised by adapters for cleanup failures; sessions log and absorb it."""
