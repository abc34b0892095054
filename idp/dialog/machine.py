from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from idp.dialog import events as ev
from idp.dialog.errors import ErrorAction
from idp.dialog.states import (
    TERMINAL_STATES,
    Authenticating,
    Cancelled,
    CheckAuth,
    CheckingAuth,
    Completed,
    ConfirmingEmail,
    ConfirmingUser,
    DeliverError,
    DeliverSuccess,
    Effect,
    Error,
    GetAssertion,
    LogoutUser,
    Offline,
    PickingEmail,
    RenderError,
    RenderOffline,
    ShowAuthenticate,
    ShowPickEmail,
    StartConfirmation,
    State,
    SyncEmails,
    pending_email,
)

logger = logging.getLogger(__name__)

Transition = Tuple[State, List[Effect]]


def _failure(state: State, action: ErrorAction, info: Dict[str, Any]) -> Transition:
    if isinstance(state, Offline):
        # Being offline explains every failure; do not stack error panels on top.
        return state, []
    return Error(action=action), [RenderError(action=action, info=info)]


def transition(state: State, event: str, payload: Optional[Dict[str, Any]] = None) -> Transition:
    """
    Pure step function of the sign-in flow.

    Returns the next state and the effects the controller must perform, in order.
    Events that do not apply to the current state leave it untouched with no effects.
    """
    info = payload or {}

    if isinstance(state, TERMINAL_STATES):
        return state, []

    if event == ev.CHANNEL_CLOSED:
        return Cancelled(), [DeliverError(reason=info.get("reason") or "client closed window")]

    # Cancel is honored from every live state, including mid-confirmation.
    if event == ev.CANCEL:
        return Cancelled(), [DeliverSuccess(assertion=None)]

    if event == ev.START:
        return CheckingAuth(), [CheckAuth()]

    if isinstance(state, Offline):
        return state, []

    if event == ev.OFFLINE:
        return Offline(), [RenderOffline()]

    if event == ev.FAILURE:
        action = info.get("action")
        if not isinstance(action, ErrorAction):
            action = ErrorAction.XHR_ERROR
        return _failure(state, action, {k: v for k, v in info.items() if k != "action"})

    if event == ev.XHR_ERROR:
        return _failure(state, ErrorAction.XHR_ERROR, dict(info))

    if event == ev.AUTH_CHECKED:
        if not isinstance(state, CheckingAuth):
            return state, []
        if info.get("authenticated"):
            return PickingEmail(), [ShowPickEmail()]
        return Authenticating(), [ShowAuthenticate()]

    if event == ev.AUTH:
        email = info.get("email")
        return Authenticating(email=email), [ShowAuthenticate(email=email)]

    if event == ev.AUTHENTICATED:
        return Authenticating(email=info.get("email")), [SyncEmails()]

    if event == ev.EMAILS_SYNCED:
        if not isinstance(state, Authenticating):
            return state, []
        return PickingEmail(), [ShowPickEmail()]

    if event in (ev.USER_STAGED, ev.RESET_PASSWORD):
        email = info.get("email")
        if not email:
            logger.warning("%s without an email; ignoring", event)
            return state, []
        return ConfirmingUser(email=email), [
            StartConfirmation(email=email, verifier="wait_for_user_validation", message=ev.USER_CONFIRMED)
        ]

    if event == ev.EMAIL_STAGED:
        email = info.get("email")
        if not email:
            logger.warning("%s without an email; ignoring", event)
            return state, []
        return ConfirmingEmail(email=email), [
            StartConfirmation(email=email, verifier="wait_for_email_validation", message=ev.EMAIL_CONFIRMED)
        ]

    if event in (ev.USER_CONFIRMED, ev.EMAIL_CONFIRMED):
        email = pending_email(state)
        if email is None:
            logger.warning("%s with no email awaiting confirmation; ignoring", event)
            return state, []
        # Stay put (the email stays remembered) until the assertion arrives.
        return state, [GetAssertion(email=email)]

    if event == ev.ASSERTION_GENERATED:
        assertion = info.get("assertion")
        if assertion is None:
            return PickingEmail(), [ShowPickEmail()]
        return Completed(assertion=assertion), [DeliverSuccess(assertion=assertion)]

    if event == ev.NOTME:
        return state, [LogoutUser()]

    if event == ev.LOGGED_OUT:
        return Authenticating(), [ShowAuthenticate()]

    logger.debug("Ignoring event %s in state %s", event, type(state).__name__)
    return state, []
