from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from idp.auth.util import hydrate_secret

# Users may go a week on the same device without entering their password again.
DEFAULT_AUTHENTICATION_DURATION_MS = 7 * 24 * 60 * 60 * 1000

API_MODES = ("all", "read", "write")
SCHEMES = ("http", "https")
# Rounds bcrypt accepts.
MIN_BCRYPT_COST = 4
MAX_BCRYPT_COST = 31


@dataclass(frozen=True)
class IdpConfig:
    cookie_secret: str
    authentication_duration_ms: int = DEFAULT_AUTHENTICATION_DURATION_MS
    # Externally visible scheme. "https" also covers TLS terminated at a trusted load balancer.
    scheme: str = "http"
    bcrypt_work_factor: int = 12
    # all: every operation; read: never register db-writing operations; write: only those.
    api_mode: str = "all"
    var_path: str = "var"

    @property
    def over_ssl(self) -> bool:
        return self.scheme == "https"

    @property
    def authentication_duration(self) -> timedelta:
        return timedelta(milliseconds=self.authentication_duration_ms)

    @property
    def cookie_max_age_seconds(self) -> int:
        return self.authentication_duration_ms // 1000


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name, "") or "").strip() or default


@lru_cache(maxsize=1)
def load_config() -> IdpConfig:
    """
    Load service configuration from environment variables.

    The cookie secret comes from IDP_COOKIE_SECRET, or is hydrated from (and on first start
    written to) `<IDP_VAR_PATH>/browserid_cookie.sekret`.
    """
    scheme = _env("IDP_SCHEME", "http").lower()
    if scheme not in SCHEMES:
        raise ValueError(f"IDP_SCHEME must be one of {SCHEMES}, got {scheme!r}")

    api_mode = _env("IDP_API_MODE", "all").lower()
    if api_mode not in API_MODES:
        raise ValueError(f"IDP_API_MODE must be one of {API_MODES}, got {api_mode!r}")

    duration_ms = int(float(_env("IDP_AUTH_DURATION_MS", str(DEFAULT_AUTHENTICATION_DURATION_MS))))
    if duration_ms <= 0:
        raise ValueError("IDP_AUTH_DURATION_MS must be positive")

    work_factor = int(_env("IDP_BCRYPT_WORK_FACTOR", "12"))
    if not MIN_BCRYPT_COST <= work_factor <= MAX_BCRYPT_COST:
        raise ValueError(f"IDP_BCRYPT_WORK_FACTOR must be in {MIN_BCRYPT_COST}..{MAX_BCRYPT_COST}, got {work_factor}")

    var_path = _env("IDP_VAR_PATH", "var")
    secret = _env("IDP_COOKIE_SECRET") or hydrate_secret("browserid_cookie", var_path)

    return IdpConfig(
        cookie_secret=secret,
        authentication_duration_ms=duration_ms,
        scheme=scheme,
        bcrypt_work_factor=work_factor,
        api_mode=api_mode,
        var_path=var_path,
    )
