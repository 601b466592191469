"""Tests for AppSettings."""

from __future__ import annotations

import pytest

from routerwatch.api.errors import ConfigError
from routerwatch.models.config import AppSettings


def _settings(**kwargs: object) -> AppSettings:
    return AppSettings(_env_file=None, **kwargs)  # type: ignore[arg-type]


class TestAppSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("ROUTERWATCH_ROUTER_HOST", "ROUTERWATCH_POLL_INTERVAL"):
            monkeypatch.delenv(name, raising=False)
        settings = _settings()
        assert settings.router_host is None
        assert settings.router_user == "admin"
        assert settings.poll_interval == 3.0
        assert settings.http_port == 3000
        assert settings.stream_port == 9090

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ROUTERWATCH_ROUTER_HOST", "192.168.88.1")
        monkeypatch.setenv("ROUTERWATCH_POLL_INTERVAL", "10")
        settings = _settings()
        assert settings.router_host == "192.168.88.1"
        assert settings.poll_interval == 10.0

    def test_init_overrides_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ROUTERWATCH_ROUTER_HOST", "192.168.88.1")
        assert _settings(router_host="10.0.0.1").router_host == "10.0.0.1"

    def test_base_url(self) -> None:
        assert _settings(router_host="192.168.88.1").base_url == "http://192.168.88.1/rest"

    def test_base_url_tls_and_port(self) -> None:
        settings = _settings(router_host="gw.lan", router_tls=True, router_port=8443)
        assert settings.base_url == "https://gw.lan:8443/rest"

    def test_base_url_requires_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ROUTERWATCH_ROUTER_HOST", raising=False)
        with pytest.raises(ConfigError, match="ROUTERWATCH_ROUTER_HOST"):
            _ = _settings().base_url
