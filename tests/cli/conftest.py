"""Shared fixtures for CLI tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from routerwatch.telemetry.setup import build_session

if TYPE_CHECKING:
    from routerwatch.models.config import AppSettings
    from routerwatch.telemetry.setup import MonitorSession
    from tests.conftest import FakeSource


@pytest.fixture(autouse=True)
def _no_log_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep Rich log output off the captured stdout."""
    monkeypatch.setattr("routerwatch.cli.main.configure_logging", lambda verbose: None)
    monkeypatch.setattr("routerwatch.cli._options.configure_logging", lambda verbose: None)


@pytest.fixture()
def cli_router(monkeypatch: pytest.MonkeyPatch, fake_source: FakeSource) -> FakeSource:
    """Route every one-shot CLI command to the in-memory router."""

    def _build(settings: AppSettings) -> MonitorSession:
        return build_session(settings, fake_source)

    monkeypatch.setattr("routerwatch.cli._client.build_session", _build)
    return fake_source
