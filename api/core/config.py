"""
Process settings read from environment variables.

`Settings.from_env()` is called once when the app is created; the resulting
value is passed to whatever needs it (session issuing, password hashing,
store selection) instead of being read from the environment on every call.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = ""
    use_in_memory_store: bool = False
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    jwt_secret: str = "dev-change-this-secret"
    jwt_algorithm: str = "HS256"
    session_cookie_name: str = "jwt"
    session_ttl_days: int = 15
    cookie_secure: bool = False
    bcrypt_rounds: int = 10
    api_prefix: str = "/api"
    cors_origins: tuple[str, ...] = field(
        default=("http://localhost:5173", "http://127.0.0.1:5173")
    )
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            database_url=os.environ.get("DATABASE_URL", "").strip(),
            use_in_memory_store=_env_bool("USE_IN_MEMORY_STORE", defaults.use_in_memory_store),
            jwt_secret=_env_str("JWT_SECRET", defaults.jwt_secret),
            jwt_algorithm=_env_str("JWT_ALG", defaults.jwt_algorithm),
            session_cookie_name=_env_str("SESSION_COOKIE_NAME", defaults.session_cookie_name),
            session_ttl_days=_env_int("SESSION_TTL_DAYS", defaults.session_ttl_days),
            cookie_secure=_env_bool("COOKIE_SECURE", defaults.cookie_secure),
            bcrypt_rounds=min(max(_env_int("BCRYPT_ROUNDS", defaults.bcrypt_rounds), 4), 31),
            api_prefix=_env_str("API_PREFIX", defaults.api_prefix).rstrip("/"),
            cors_origins=_env_list("CORS_ORIGINS", defaults.cors_origins),
            log_level=_env_str("LOG_LEVEL", defaults.log_level),
            log_file=os.environ.get("LOG_FILE", "").strip() or None,
        )

    @property
    def session_ttl_seconds(self) -> int:
        return self.session_ttl_days * 24 * 60 * 60

    @property
    def in_memory(self) -> bool:
        return self.use_in_memory_store or not self.database_url
