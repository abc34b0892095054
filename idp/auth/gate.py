from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from dateutil import parser as date_parser

from idp.auth.session import AUTHENTICATED_AT, AUTHENTICATED_USER, clear_authenticated_user

logger = logging.getLogger(__name__)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str) and value.strip():
        try:
            ts = date_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def is_authenticated(session: Dict[str, Any], duration_ms: int, now: datetime | None = None) -> Optional[str]:
    """
    Return the authenticated identity of `session`, or None.

    A session claiming a user but carrying a missing, unparseable or stale
    `authenticatedAt` is reset to the unauthenticated state (only `csrf` survives).
    """
    user = session.get(AUTHENTICATED_USER)
    if not user:
        return None

    at = _parse_timestamp(session.get(AUTHENTICATED_AT))
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    if at is None:
        reason = "bad timestamp"
    elif current - at > timedelta(milliseconds=duration_ms):
        reason = "expired"
    else:
        return str(user)

    logger.debug("Session authentication has expired: %s", reason)
    clear_authenticated_user(session)
    return None
