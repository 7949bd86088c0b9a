import logging

import pytest

from webhook_config import Settings

ENV_VARS = [
    "TRADINGVIEW_SECRET", "TIKTOK_ACCESS_TOKEN", "TIKTOK_PRIVACY_LEVEL", "TIKTOK_POST_URL",
    "TIKTOK_TIMEOUT", "ALERT_KIND", "CAPTION_OMIT_MISSING", "RECENT_EVENTS_ENABLED",
    "PORT", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_are_safe(caplog):
    with caplog.at_level(logging.WARNING):
        settings = Settings.from_env(dotenv=False)
    assert settings == Settings()
    assert settings.privacy_level == "SELF_ONLY"
    assert settings.recent_events_enabled is False
    assert "TRADINGVIEW_SECRET" in caplog.text
    assert "open" in caplog.text
    assert "TIKTOK_ACCESS_TOKEN" in caplog.text


def test_reads_environment(monkeypatch, caplog):
    monkeypatch.setenv("TRADINGVIEW_SECRET", "s3cret")
    monkeypatch.setenv("TIKTOK_ACCESS_TOKEN", "tok")
    monkeypatch.setenv("TIKTOK_PRIVACY_LEVEL", "MUTUAL_FOLLOW_FRIENDS")
    monkeypatch.setenv("TIKTOK_POST_URL", "https://tiktok.test/post")
    monkeypatch.setenv("TIKTOK_TIMEOUT", "2.5")
    monkeypatch.setenv("ALERT_KIND", "Liquidity")
    monkeypatch.setenv("CAPTION_OMIT_MISSING", "no")
    monkeypatch.setenv("RECENT_EVENTS_ENABLED", "1")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    with caplog.at_level(logging.WARNING):
        settings = Settings.from_env(dotenv=False)
    assert settings == Settings(
        secret="s3cret",
        access_token="tok",
        privacy_level="MUTUAL_FOLLOW_FRIENDS",
        post_url="https://tiktok.test/post",
        timeout=2.5,
        alert_kind="liquidity",
        omit_missing=False,
        recent_events_enabled=True,
        port=8080,
        log_level="DEBUG",
    )
    assert caplog.text == ""


@pytest.mark.parametrize("name,value,field,expected", [
    ("TIKTOK_TIMEOUT", "soon", "timeout", 10.0),
    ("TIKTOK_TIMEOUT", "-1", "timeout", 10.0),
    ("PORT", "http", "port", 10000),
    ("ALERT_KIND", "volume", "alert_kind", "auto"),
    ("CAPTION_OMIT_MISSING", "maybe", "omit_missing", None),
    ("LOG_LEVEL", "chatty", "log_level", "INFO"),
])
def test_bad_values_fall_back_with_warning(monkeypatch, caplog, name, value, field, expected):
    monkeypatch.setenv(name, value)
    with caplog.at_level(logging.WARNING):
        settings = Settings.from_env(dotenv=False)
    assert getattr(settings, field) == expected
    assert f"Ignoring {name}" in caplog.text


def test_blank_values_count_as_unset(monkeypatch):
    monkeypatch.setenv("TRADINGVIEW_SECRET", "   ")
    monkeypatch.setenv("TIKTOK_PRIVACY_LEVEL", "")
    settings = Settings.from_env(dotenv=False)
    assert settings.secret is None
    assert settings.privacy_level == "SELF_ONLY"
