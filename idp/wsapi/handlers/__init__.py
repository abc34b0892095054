from __future__ import annotations

from typing import Any, List, Tuple

from idp.wsapi.handlers import (
    authenticate_user,
    complete_email_addition,
    complete_user_creation,
    email_addition_status,
    email_for_token,
    have_email,
    list_emails,
    logout,
    session_context,
    stage_email,
    stage_user,
    user_creation_status,
)

# Single source of truth for the operations served under /wsapi/.
DEFAULT_HANDLERS: List[Tuple[str, Any]] = [
    ("session_context", session_context),
    ("have_email", have_email),
    ("stage_user", stage_user),
    ("user_creation_status", user_creation_status),
    ("email_for_token", email_for_token),
    ("complete_user_creation", complete_user_creation),
    ("authenticate_user", authenticate_user),
    ("logout", logout),
    ("list_emails", list_emails),
    ("stage_email", stage_email),
    ("email_addition_status", email_addition_status),
    ("complete_email_addition", complete_email_addition),
]
