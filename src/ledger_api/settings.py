"""Ledger API settings (conventional Pydantic v2)."""

from __future__ import annotations

import json
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    Field,
    PrivateAttr,
    SecretStr,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# ---- Defaults ---------------------------------------------------------------

MODULE_DIR = Path(__file__).resolve().parent
DEFAULT_API_ROOT = MODULE_DIR.parent.parent
DEFAULT_ALEMBIC_INI = DEFAULT_API_ROOT / "alembic.ini"
DEFAULT_ALEMBIC_MIGRATIONS = DEFAULT_API_ROOT / "migrations"

# Only ever used outside production, where a signing key is mandatory.
FALLBACK_JWT_SECRET = "ledger-api-insecure-fallback-signing-key-for-tests-only"

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


# ---- Helpers ----------------------------------------------------------------

def _parse_duration(value: Any, *, field_name: str) -> timedelta:
    """Accept seconds (int/float/str) or '60s'/'5m'/'1h'/'14d'."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError(f"{field_name} must not be blank")
        try:
            seconds = float(s)
        except ValueError:
            unit = s[-1].lower()
            num = s[:-1].strip()
            if unit not in _UNIT_SECONDS or not num:
                raise ValueError(
                    f"{field_name} must be secs or 'Xs','Xm','Xh','Xd'"
                ) from None
            try:
                seconds = float(num) * _UNIT_SECONDS[unit]
            except ValueError as exc:
                raise ValueError(
                    f"{field_name} must be secs or 'Xs','Xm','Xh','Xd'"
                ) from exc
    else:
        raise TypeError(f"{field_name} must be number, duration string, or timedelta")
    if seconds <= 0:
        raise ValueError(f"{field_name} must be > 0 seconds")
    return timedelta(seconds=seconds)


def _list_from_env(value: Any) -> list[str]:
    """JSON array or comma string; strip empties; dedupe preserving order."""
    if value in (None, "", []):
        return []
    if isinstance(value, str):
        s = value.strip()
        if s.startswith("["):
            try:
                parsed = json.loads(s)
            except json.JSONDecodeError as exc:
                raise ValueError("Expected a JSON array") from exc
            if not isinstance(parsed, list):
                raise ValueError("Expected a JSON array")
            items = [str(x).strip() for x in parsed]
        else:
            items = [seg.strip() for seg in s.split(",")]
    elif isinstance(value, (list, tuple, set)):
        items = [str(x).strip() for x in value]
    else:
        raise TypeError("Expected string or list")

    seen: set[str] = set()
    out: list[str] = []
    for x in items:
        if x and x not in seen:
            seen.add(x)
            out.append(x)
    return out


# ---- Settings ---------------------------------------------------------------

class Settings(BaseSettings):
    """FastAPI settings loaded from LEDGER_* (and legacy DB_*/JWT_KEY) variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LEDGER_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )

    _jwt_secret_fallback: bool = PrivateAttr(default=False)

    # Core
    app_name: str = "Ledger API"
    app_version: str = "0.1.0"
    environment: Literal["development", "test", "production"] = "development"
    api_docs_enabled: bool = True
    docs_url: str = "/docs"
    openapi_url: str = "/openapi.json"
    logging_level: str = "INFO"

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = Field(default=8000, gt=0, lt=65536)
    server_cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=list)

    # Paths
    alembic_ini_path: Path = Field(default=DEFAULT_ALEMBIC_INI)
    alembic_migrations_dir: Path = Field(default=DEFAULT_ALEMBIC_MIGRATIONS)

    # Database
    database_dsn: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DB_DSN", "LEDGER_DATABASE_DSN"),
    )
    database_max_open_conns: int = Field(
        default=25,
        gt=0,
        validation_alias=AliasChoices("DB_MAX_OPEN_CONNS", "LEDGER_DATABASE_MAX_OPEN_CONNS"),
    )
    database_max_idle_conns: int = Field(
        default=25,
        ge=0,
        validation_alias=AliasChoices("DB_MAX_IDLE_CONNS", "LEDGER_DATABASE_MAX_IDLE_CONNS"),
    )
    database_conn_max_lifetime: timedelta = Field(
        default=timedelta(minutes=5),
        validation_alias=AliasChoices(
            "DB_CONN_MAX_LIFETIME", "LEDGER_DATABASE_CONN_MAX_LIFETIME"
        ),
    )
    database_connect_timeout: timedelta = Field(default=timedelta(seconds=5))
    database_echo: bool = False
    database_migrate_on_startup: bool = True

    # Auth
    jwt_secret: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("JWT_KEY", "LEDGER_JWT_SECRET"),
    )
    jwt_algorithm: str = "HS256"
    jwt_access_ttl: timedelta = Field(default=timedelta(minutes=30))
    jwt_refresh_ttl: timedelta = Field(default=timedelta(minutes=1440))

    # Sessions
    kv_backend: Literal["database", "memory"] = "database"
    kv_key_prefix: str = "ledger:"
    session_cookie_name: str = "ledger_session"
    session_cookie_secure: bool = False
    kv_purge_interval: timedelta = Field(default=timedelta(minutes=10))

    # ---- Validators ----

    @field_validator("logging_level", mode="before")
    @classmethod
    def _v_log_level(cls, v: Any) -> str:
        return str(v or "INFO").strip().upper()

    @field_validator("server_cors_origins", mode="before")
    @classmethod
    def _v_cors(cls, v: Any) -> list[str]:
        return _list_from_env(v)

    @field_validator("database_dsn", mode="before")
    @classmethod
    def _v_database_dsn(cls, v: Any) -> str | None:
        if v in (None, ""):
            return None
        return str(v).strip()

    @field_validator("kv_backend", mode="before")
    @classmethod
    def _v_kv_backend(cls, v: Any) -> str:
        return str(v or "database").strip().lower()

    @field_validator("jwt_secret", mode="before")
    @classmethod
    def _v_jwt_secret(cls, v: Any) -> SecretStr | None:
        if v is None:
            return None
        raw = v.get_secret_value() if isinstance(v, SecretStr) else str(v).strip()
        return SecretStr(raw) if raw else None

    @field_validator(
        "database_conn_max_lifetime",
        "database_connect_timeout",
        "jwt_access_ttl",
        "jwt_refresh_ttl",
        "kv_purge_interval",
        mode="before",
    )
    @classmethod
    def _v_durations(cls, v: Any, info: ValidationInfo) -> timedelta:
        return _parse_duration(v, field_name=info.field_name)

    @model_validator(mode="after")
    def _finalize(self) -> Settings:
        if self.jwt_secret is None:
            if self.environment == "production":
                raise ValueError("JWT_KEY (or LEDGER_JWT_SECRET) is required in production")
            self.jwt_secret = SecretStr(FALLBACK_JWT_SECRET)
            self._jwt_secret_fallback = True
        elif self.environment == "production" and len(self.jwt_secret.get_secret_value()) < 32:
            raise ValueError("JWT_KEY must be at least 32 characters in production")

        if self.jwt_refresh_ttl <= self.jwt_access_ttl:
            raise ValueError("jwt_refresh_ttl must be longer than jwt_access_ttl")
        return self

    # ---- Convenience ----

    @property
    def jwt_secret_value(self) -> str:
        assert self.jwt_secret is not None
        return self.jwt_secret.get_secret_value()

    @property
    def jwt_secret_fallback(self) -> bool:
        return self._jwt_secret_fallback


@lru_cache(maxsize=1)
def _build_settings() -> Settings:
    return Settings()


def get_settings() -> Settings:
    return _build_settings()


def reload_settings() -> Settings:
    _build_settings.cache_clear()
    return _build_settings()


__all__ = [
    "FALLBACK_JWT_SECRET",
    "Settings",
    "get_settings",
    "reload_settings",
]
