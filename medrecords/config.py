"""
Process-wide configuration.

All environment lookups happen here, once, when the settings module is
imported.  The resulting :class:`AppConfig` is exposed as
``settings.APP_CONFIG`` and handed to the components that need it (the
error formatter, the token issuer and the login throttle) instead of
each of them reading ``os.environ`` on their own.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

DEFAULT_SECRET = "replace-me-with-a-secure-secret-key"
TRUTHY = {"1", "true", "yes"}


def _flag(value: str | None, default: str = "0") -> bool:
    return (value or default).strip().lower() in TRUTHY


def _csv(value: str | None) -> tuple[str, ...]:
    return tuple(v.strip() for v in (value or "").split(",") if v.strip())


@dataclass(frozen=True)
class AppConfig:
    env: str = "dev"
    debug: bool = False
    secret_key: str = DEFAULT_SECRET
    allowed_hosts: tuple[str, ...] = ("127.0.0.1", "localhost")
    jwt_secret: str = DEFAULT_SECRET
    jwt_expires_minutes: int = 60 * 24
    login_rate: str = "10/10m"
    log_level: str = "INFO"
    cors_allowed_origins: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_production(self) -> bool:
        return self.env == "prod"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build the configuration from environment variables.

        Raises ``RuntimeError`` when a production deployment is left with
        development defaults.
        """
        environ = os.environ if environ is None else environ
        secret_key = environ.get("SECRET_KEY") or DEFAULT_SECRET
        config = cls(
            env=environ.get("ENV", "dev").strip().lower(),
            debug=_flag(environ.get("DEBUG")),
            secret_key=secret_key,
            allowed_hosts=_csv(environ.get("ALLOWED_HOSTS", "127.0.0.1,localhost")),
            jwt_secret=environ.get("JWT_SECRET") or secret_key,
            jwt_expires_minutes=int(environ.get("JWT_EXPIRES_MINUTES", "1440")),
            login_rate=environ.get("LOGIN_RATE", "10/10m"),
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
            cors_allowed_origins=_csv(environ.get("CORS_ALLOWED_ORIGINS")),
        )
        config.check()
        return config

    def check(self) -> None:
        if self.jwt_expires_minutes <= 0:
            raise RuntimeError("JWT_EXPIRES_MINUTES must be positive")
        if not self.is_production:
            return
        if self.debug:
            raise RuntimeError("DEBUG must be 0 in prod")
        if "*" in self.allowed_hosts:
            raise RuntimeError("ALLOWED_HOSTS cannot contain * in prod")
        if self.secret_key == DEFAULT_SECRET or self.jwt_secret == DEFAULT_SECRET:
            raise RuntimeError("SECRET_KEY/JWT_SECRET must be set securely in prod")
