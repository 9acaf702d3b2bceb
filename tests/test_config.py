from __future__ import annotations

import pytest

from qa2index.crawl.discovery import BackendDiscovery, StaticDiscovery, discovery_from_settings
from qa2index.crawl.errors import ConfigError, DiscoveryError
from qa2index.utils.config import DEFAULT_USER_AGENT, Settings

ENV_KEYS = (
    "QETA_PLUGIN_ID", "QETA_BASE_URL", "BACKEND_BASE_URL", "QETA_TOKEN",
    "QETA_PAGE_SIZE", "QETA_TIMEOUT", "QETA_LOCATION_PREFIX", "QETA_USER_AGENT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_settings_defaults() -> None:
    s = Settings.from_env()

    assert s.QETA_PLUGIN_ID == "qeta"
    assert s.QETA_BASE_URL is None
    assert s.QETA_TOKEN is None
    assert s.QETA_PAGE_SIZE == 50
    assert s.QETA_TIMEOUT == 30
    assert s.QETA_LOCATION_PREFIX == "/qeta"
    assert s.QETA_USER_AGENT == DEFAULT_USER_AGENT


def test_settings_read_from_env(monkeypatch) -> None:
    monkeypatch.setenv("QETA_BASE_URL", "http://backend/api/qeta")
    monkeypatch.setenv("QETA_TOKEN", "  secret  ")
    monkeypatch.setenv("QETA_PAGE_SIZE", "10")
    monkeypatch.setenv("QETA_LOCATION_PREFIX", "/qa/")

    s = Settings.from_env()

    assert s.QETA_BASE_URL == "http://backend/api/qeta"
    assert s.QETA_TOKEN == "secret"
    assert s.QETA_PAGE_SIZE == 10
    assert s.QETA_LOCATION_PREFIX == "/qa"


def test_blank_token_counts_as_unset(monkeypatch) -> None:
    monkeypatch.setenv("QETA_TOKEN", "   ")
    assert Settings.from_env().QETA_TOKEN is None


@pytest.mark.parametrize("value", ["abc", "0", "-5"])
def test_invalid_page_size(monkeypatch, value: str) -> None:
    monkeypatch.setenv("QETA_PAGE_SIZE", value)
    with pytest.raises(ConfigError):
        Settings.from_env()


def test_invalid_explicit_value() -> None:
    with pytest.raises(ConfigError):
        Settings(QETA_TIMEOUT=0)


class TestDiscoveryFromSettings:
    def test_base_url_wins(self) -> None:
        s = Settings(QETA_BASE_URL="http://a/api/qeta/", BACKEND_BASE_URL="http://b")
        d = discovery_from_settings(s)
        assert isinstance(d, StaticDiscovery)
        assert d.get_base_url("qeta") == "http://a/api/qeta"

    def test_backend_url(self) -> None:
        d = discovery_from_settings(Settings(BACKEND_BASE_URL="http://b/"))
        assert isinstance(d, BackendDiscovery)
        assert d.get_base_url("qeta") == "http://b/api/qeta"

    def test_explicit_arguments_override_settings(self) -> None:
        d = discovery_from_settings(Settings(QETA_BASE_URL="http://a"), base_url="http://c/api/qeta")
        assert d.get_base_url("qeta") == "http://c/api/qeta"

    def test_nothing_configured(self) -> None:
        with pytest.raises(ConfigError):
            discovery_from_settings(Settings())

    def test_static_discovery_unknown_plugin(self) -> None:
        with pytest.raises(DiscoveryError):
            StaticDiscovery({"qeta": "http://a"}).get_base_url("catalog")
