from __future__ import annotations

import logging

import pytest


@pytest.fixture
def debug_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture everything the filesource loggers emit, debug included."""
    caplog.set_level(logging.DEBUG, logger="filesource")
    return caplog


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FILESOURCE_PATH", "FILESOURCE_POLL_SECONDS", "FILESOURCE_HOSTNAME"):
        monkeypatch.delenv(name, raising=False)
