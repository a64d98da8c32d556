from pathlib import Path

import pytest

from headless_session.browser.lightpanda import LightPandaAdapter
from headless_session.browser.puppeteer import PuppeteerAdapter
from headless_session.config import BrowserSettings, HeadlessBrowserType
from headless_session.factory import adapter_class_for, build_session
from headless_session.session import SessionState


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        ("puppeteer", PuppeteerAdapter),
        (HeadlessBrowserType.LIGHTPANDA, LightPandaAdapter),
    ],
)
def test_adapter_class_for_known_backends(kind, expected):
    assert adapter_class_for(kind) is expected


def test_adapter_class_for_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported headless browser type"):
        adapter_class_for("firefox")


def test_build_session_fixes_backend_at_construction(tmp_path: Path):
    settings = BrowserSettings(storage_path=tmp_path, headless_browser_type="lightpanda")
    session = build_session(settings)
    try:
        assert session.backend_kind is HeadlessBrowserType.LIGHTPANDA
        assert session.settings is settings
        assert session.state is SessionState.UNINITIALIZED
        assert session.storage_dir is None
    finally:
        session.close_browser()
