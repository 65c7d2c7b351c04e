from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from ledger_api.settings import FALLBACK_JWT_SECRET, Settings


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for var in (
        "LEDGER_ENVIRONMENT",
        "LEDGER_JWT_SECRET",
        "JWT_KEY",
        "LEDGER_JWT_ACCESS_TTL",
        "LEDGER_JWT_REFRESH_TTL",
        "LEDGER_SERVER_CORS_ORIGINS",
        "LEDGER_KV_BACKEND",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_durations_accept_suffixes(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LEDGER_JWT_ACCESS_TTL", "15m")
    clean_env.setenv("LEDGER_JWT_REFRESH_TTL", "2d")
    settings = Settings(_env_file=None)
    assert settings.jwt_access_ttl == timedelta(minutes=15)
    assert settings.jwt_refresh_ttl == timedelta(days=2)


def test_plain_seconds_are_accepted(clean_env: pytest.MonkeyPatch) -> None:
    settings = Settings(_env_file=None, database_connect_timeout="2.5")
    assert settings.database_connect_timeout == timedelta(seconds=2.5)


@pytest.mark.parametrize("value", ["0", "-5", "10x", "m"])
def test_invalid_durations_are_rejected(clean_env: pytest.MonkeyPatch, value: str) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, database_connect_timeout=value)


def test_refresh_ttl_must_exceed_access_ttl(clean_env: pytest.MonkeyPatch) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, jwt_access_ttl="1h", jwt_refresh_ttl="30m")


def test_legacy_jwt_key_alias(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("JWT_KEY", "legacy-signing-key")
    settings = Settings(_env_file=None)
    assert settings.jwt_secret_value == "legacy-signing-key"
    assert settings.jwt_secret_fallback is False


def test_missing_secret_falls_back_outside_production(clean_env: pytest.MonkeyPatch) -> None:
    settings = Settings(_env_file=None)
    assert settings.jwt_secret_value == FALLBACK_JWT_SECRET
    assert settings.jwt_secret_fallback is True


def test_production_requires_a_strong_secret(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LEDGER_ENVIRONMENT", "production")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)

    clean_env.setenv("LEDGER_JWT_SECRET", "too-short")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)

    clean_env.setenv("LEDGER_JWT_SECRET", "x" * 40)
    assert Settings(_env_file=None).environment == "production"


def test_cors_origins_from_comma_list(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv(
        "LEDGER_SERVER_CORS_ORIGINS", "http://a.test, http://b.test,,http://a.test"
    )
    settings = Settings(_env_file=None)
    assert settings.server_cors_origins == ["http://a.test", "http://b.test"]


def test_kv_backend_is_normalized(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LEDGER_KV_BACKEND", " Memory ")
    assert Settings(_env_file=None).kv_backend == "memory"
