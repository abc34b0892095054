from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from idp.dialog.errors import ErrorAction

# ---- States ----


@dataclass(frozen=True)
class Init:
    pass


@dataclass(frozen=True)
class CheckingAuth:
    pass


@dataclass(frozen=True)
class Authenticating:
    email: Optional[str] = None


@dataclass(frozen=True)
class ConfirmingUser:
    email: str


@dataclass(frozen=True)
class ConfirmingEmail:
    email: str


@dataclass(frozen=True)
class PickingEmail:
    pass


@dataclass(frozen=True)
class Completed:
    assertion: str


@dataclass(frozen=True)
class Cancelled:
    pass


@dataclass(frozen=True)
class Offline:
    pass


@dataclass(frozen=True)
class Error:
    action: ErrorAction


State = Union[
    Init,
    CheckingAuth,
    Authenticating,
    ConfirmingUser,
    ConfirmingEmail,
    PickingEmail,
    Completed,
    Cancelled,
    Offline,
    Error,
]

TERMINAL_STATES = (Completed, Cancelled)


def pending_email(state: State) -> Optional[str]:
    """The email awaiting confirmation, if the state carries one."""
    if isinstance(state, (ConfirmingUser, ConfirmingEmail)):
        return state.email
    return None


# ---- Effects (performed by the controller) ----


@dataclass(frozen=True)
class CheckAuth:
    pass


@dataclass(frozen=True)
class ShowAuthenticate:
    email: Optional[str] = None


@dataclass(frozen=True)
class SyncEmails:
    pass


@dataclass(frozen=True)
class ShowPickEmail:
    pass


@dataclass(frozen=True)
class StartConfirmation:
    email: str
    # Name of the UserService polling method, e.g. "wait_for_user_validation".
    verifier: str
    # Event published once the email is confirmed.
    message: str


@dataclass(frozen=True)
class GetAssertion:
    email: str


@dataclass(frozen=True)
class LogoutUser:
    pass


@dataclass(frozen=True)
class DeliverSuccess:
    assertion: Optional[str]


@dataclass(frozen=True)
class DeliverError:
    reason: str


@dataclass(frozen=True)
class RenderError:
    action: ErrorAction
    info: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RenderOffline:
    pass


Effect = Union[
    CheckAuth,
    ShowAuthenticate,
    SyncEmails,
    ShowPickEmail,
    StartConfirmation,
    GetAssertion,
    LogoutUser,
    DeliverSuccess,
    DeliverError,
    RenderError,
    RenderOffline,
]
