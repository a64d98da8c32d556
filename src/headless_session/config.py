"""Configuration models for headless browser sessions."""

from __future__ import annotations

import enum
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HeadlessBrowserType(str, enum.Enum):
    """Automation backends a session can drive."""

    PUPPETEER = "puppeteer"
    LIGHTPANDA = "lightpanda"


DEFAULT_CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class BrowserSettings(BaseSettings):
    """Snapshot of the browser configuration captured when a session is built."""

    model_config = SettingsConfigDict(
        env_prefix="HEADLESS_SESSION_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        frozen=True,
    )

    headless_browser_type: HeadlessBrowserType = HeadlessBrowserType.PUPPETEER
    viewport_width: int = Field(default=900, gt=0)
    viewport_height: int = Field(default=600, gt=0)
    storage_path: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "headless-session",
        description="Base directory for backend working files.",
    )
    launch_timeout: float = Field(default=30.0, gt=0)
    navigation_timeout: float = Field(default=30.0, gt=0)
    action_timeout: float = Field(default=10.0, gt=0)
    console_idle: float = Field(
        default=0.5,
        ge=0,
        description="Seconds without new console output before an action is considered settled.",
    )
    console_settle_timeout: float = Field(default=3.0, ge=0)
    chromium_executable: Optional[Path] = None
    chromium_args: list[str] = Field(default_factory=lambda: list(DEFAULT_CHROMIUM_ARGS))
    lightpanda_executable: Optional[Path] = None
    lightpanda_host: str = "127.0.0.1"
    lightpanda_port: Optional[int] = Field(default=None, ge=0, le=65535)


def load_settings(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> BrowserSettings:
    """Load settings from an optional YAML file, the environment and overrides.

    Values from ``path`` win over the environment and ``overrides`` win over both.
    """

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    return BrowserSettings(**{**data, **overrides}, **settings_kwargs)
