from __future__ import annotations

from typing import Tuple

# Published by network and UI collaborators.
START = "start"
AUTH = "auth"
AUTHENTICATED = "authenticated"
USER_STAGED = "user_staged"
USER_CONFIRMED = "user_confirmed"
RESET_PASSWORD = "reset_password"
EMAIL_STAGED = "email_staged"
EMAIL_CONFIRMED = "email_confirmed"
ASSERTION_GENERATED = "assertion_generated"
NOTME = "notme"
CANCEL = "cancel"
OFFLINE = "offline"
XHR_ERROR = "xhr_error"

PUBLIC_EVENTS: Tuple[str, ...] = (
    OFFLINE,
    XHR_ERROR,
    USER_STAGED,
    USER_CONFIRMED,
    AUTHENTICATED,
    RESET_PASSWORD,
    ASSERTION_GENERATED,
    EMAIL_STAGED,
    EMAIL_CONFIRMED,
    NOTME,
    AUTH,
    START,
    CANCEL,
)

# Completions of the controller's own collaborator calls; never subscribable.
AUTH_CHECKED = "auth_checked"
EMAILS_SYNCED = "emails_synced"
LOGGED_OUT = "logged_out"
FAILURE = "failure"
CHANNEL_CLOSED = "channel_closed"
