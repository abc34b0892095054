from __future__ import annotations

import logging
import secrets
from typing import Any, Optional

from idp.auth.session import COOKIE_PATH, Session

logger = logging.getLogger(__name__)


def in_wsapi_namespace(path: str) -> bool:
    return path == COOKIE_PATH or path.startswith(COOKIE_PATH + "/")


def _tokens_match(submitted: Any, expected: str) -> bool:
    if not isinstance(submitted, str):
        return False
    return secrets.compare_digest(submitted.encode("utf-8"), expected.encode("utf-8"))


def csrf_violation(path: str, session: Optional[Session], submitted: Any) -> Optional[str]:
    """
    Check a POST against the session's CSRF token.

    Returns None when the request may proceed, otherwise a short reason meant for the
    server log only. Callers must answer with a generic bad request.
    """
    if not in_wsapi_namespace(path):
        reason = f"POST only allowed to {COOKIE_PATH} urls, not {path!r}"
    elif session is None:
        reason = f"POST calls to {COOKIE_PATH} require an active session"
    elif session.csrf is None:
        reason = f"POST calls to {COOKIE_PATH} require a csrf token to be set"
    elif not _tokens_match(submitted, session.csrf):
        reason = f"token mismatch. got: {submitted!r} want: {session.csrf!r}"
    else:
        return None
    logger.warning("CSRF validation failure: %s", reason)
    return reason
