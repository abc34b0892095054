from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

from idp.auth.config import IdpConfig
from idp.auth.util import random_token

logger = logging.getLogger(__name__)

COOKIE_KEY = "browserid_state"
# Sessions only travel with /wsapi calls; everything else stays cacheable.
COOKIE_PATH = "/wsapi"
SESSION_SALT = "idp-wsapi-session-v1"

# Wire names of the session fields.
CSRF = "csrf"
AUTHENTICATED_USER = "authenticatedUser"
AUTHENTICATED_AT = "authenticatedAt"
# Staging tokens the browser is waiting on (not authentication artifacts, but cleared with them).
PENDING_CREATION = "pendingCreation"
PENDING_ADDITION = "pendingAddition"


class Session(Dict[str, Any]):
    """Decoded cookie session. `new` is True when no valid cookie was presented."""

    def __init__(self, *args: Any, new: bool = False, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.new = new

    @property
    def csrf(self) -> Optional[str]:
        value = self.get(CSRF)
        return value if isinstance(value, str) else None


def new_session() -> Session:
    return Session({CSRF: random_token(32)}, new=True)


def _serializer(cfg: IdpConfig) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key=cfg.cookie_secret, salt=SESSION_SALT)


def load_session(cfg: IdpConfig, value: str | None) -> Session:
    """
    Decode the session cookie, failing soft.

    A missing, unparseable, tampered or expired cookie yields a fresh session carrying a
    newly generated CSRF token.
    """
    if not value:
        return new_session()
    try:
        data = _serializer(cfg).loads(value, max_age=cfg.cookie_max_age_seconds)
    except (BadSignature, BadTimeSignature, ValueError) as e:
        logger.debug("Discarding invalid session cookie: %s", e.__class__.__name__)
        return new_session()
    if not isinstance(data, dict):
        return new_session()
    session = Session(data)
    if session.csrf is None:
        session[CSRF] = random_token(32)
    return session


def persist_session(cfg: IdpConfig, session: Session) -> str:
    return _serializer(cfg).dumps(dict(session))


def clear_authenticated_user(session: Dict[str, Any]) -> None:
    """Drop every session field except the CSRF token."""
    for key in list(session.keys()):
        if key != CSRF:
            del session[key]


def set_authenticated_user(session: Dict[str, Any], email: str, now: datetime | None = None) -> None:
    at = now or datetime.now(timezone.utc)
    session[AUTHENTICATED_USER] = email
    session[AUTHENTICATED_AT] = at.isoformat()


def session_cookie_kwargs(cfg: IdpConfig, value: str) -> dict:
    return {
        "key": COOKIE_KEY,
        "value": value,
        "max_age": cfg.cookie_max_age_seconds,
        "httponly": True,
        "secure": cfg.over_ssl,
        "samesite": "lax",
        "path": COOKIE_PATH,
    }
