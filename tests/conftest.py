from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from fixture_server import FixtureServer
from headless_session.config import BrowserSettings


@pytest.fixture
def fixture_server() -> Iterator[FixtureServer]:
    with FixtureServer() as server:
        yield server


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    return tmp_path / "global-storage"


@pytest.fixture
def settings(storage_root: Path) -> BrowserSettings:
    return BrowserSettings(
        storage_path=storage_root,
        console_idle=0,
        console_settle_timeout=0,
    )
