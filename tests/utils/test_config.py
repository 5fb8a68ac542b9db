from pathlib import Path

import pytest
from pydantic import ValidationError

from lnrelay.utils.config import Settings, get_settings, reload_settings


def test_settings_defaults():
    """Defaults point at a local node and the candy memo."""
    settings = Settings()

    assert settings.lnd_rest_url == "https://localhost:8080"
    assert settings.lnd_macaroon == ""
    assert settings.memo_template == "Candy for $amt sat"
    assert settings.listener_queue_size == 1000
    assert settings.tls_verify is True


def test_settings_env_override(monkeypatch):
    """Environment variables with the LNRELAY_ prefix override defaults."""
    monkeypatch.setenv("LNRELAY_LND_REST_URL", "https://node.example:8080")
    monkeypatch.setenv("LNRELAY_LND_MACAROON", "  0201AB  ")
    monkeypatch.setenv("LNRELAY_MEMO_TEMPLATE", "Coffee: $amt sat")
    monkeypatch.setenv("LNRELAY_LOG_LEVEL", "debug")

    settings = reload_settings()

    assert settings.lnd_rest_url == "https://node.example:8080"
    assert settings.lnd_macaroon == "0201AB"
    assert settings.memo_template == "Coffee: $amt sat"
    assert settings.log_level == "DEBUG"
    assert get_settings() is settings


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_macaroon_not_in_repr():
    settings = Settings(lnd_macaroon="0201deadbeef")

    assert "0201deadbeef" not in repr(settings)


@pytest.mark.parametrize(
    "overrides",
    [
        {"lnd_macaroon": "not-hex"},
        {"log_level": "LOUD"},
        {"listener_queue_size": 0},
        {"invoice_expiry_seconds": 10},
        {"lnd_timeout_seconds": 0},
    ],
)
def test_invalid_settings(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_tls_verify_options(tmp_path: Path):
    cert = tmp_path / "tls.cert"

    assert Settings(lnd_tls_cert_path=cert).tls_verify == str(cert)
    assert Settings(lnd_tls_cert_path=cert, lnd_verify_tls=False).tls_verify is False
