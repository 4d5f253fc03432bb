"""Server settings, read from environment variables such as ``JWT_SECRET`` and ``DATABASE_URL``."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Tuple

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Token signing, database, CORS, invite timing and logging options for one server."""

    jwt_secret: str = "fallback-secret-for-dev"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    db_url: str = "sqlite://database.db"
    allowed_origins: Tuple[str, ...] = ("*",)
    # Pending chat invites are dropped after this many seconds; 0 disables expiry.
    invite_timeout_seconds: float = 10.0
    collapse_mutual_invites: bool = True
    log_level: str = "INFO"
    json_logs: bool = False

    @property
    def invite_expiry_enabled(self) -> bool:
        """Return whether pending invites are expired server-side."""

        return self.invite_timeout_seconds > 0


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def get_settings() -> Settings:
    """Build settings from the environment, falling back to the defaults."""

    settings = Settings()
    overrides: dict = {}

    secret = os.getenv("JWT_SECRET")
    if secret:
        overrides["jwt_secret"] = secret
    algorithm = os.getenv("JWT_ALGORITHM")
    if algorithm:
        overrides["jwt_algorithm"] = algorithm
    expire = os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES")
    if expire:
        overrides["access_token_expire_minutes"] = int(expire)
    db_url = os.getenv("DATABASE_URL")
    if db_url:
        overrides["db_url"] = db_url
    origins = os.getenv("ALLOWED_ORIGINS")
    if origins:
        overrides["allowed_origins"] = tuple(o.strip() for o in origins.split(",") if o.strip())
    timeout = os.getenv("INVITE_TIMEOUT_SECONDS")
    if timeout:
        overrides["invite_timeout_seconds"] = float(timeout)
    overrides["collapse_mutual_invites"] = _env_bool(
        "COLLAPSE_MUTUAL_INVITES", settings.collapse_mutual_invites
    )
    level = os.getenv("LOG_LEVEL")
    if level:
        overrides["log_level"] = level.upper()
    overrides["json_logs"] = _env_bool("JSON_LOGS", settings.json_logs)

    return replace(settings, **overrides)


__all__ = ["Settings", "get_settings"]
