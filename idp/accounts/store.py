from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Literal, Optional, Protocol, Tuple

from idp.auth.util import random_token

RegistrationStatus = Literal["complete", "pending", "noRegistration"]


@dataclass
class Account:
    user_id: int
    password_hash: str
    emails: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class StagedEmail:
    """An email awaiting out-of-band confirmation (new account, password reset or addition)."""

    token: str
    email: str
    site: str
    # Set when the email is being added to an existing account.
    owner_email: Optional[str]
    staged_at: datetime


class AccountStore(Protocol):
    """Queries the wsapi handlers need from account storage."""

    def email_known(self, email: str) -> bool: ...

    def stage_user(self, email: str, site: str) -> str: ...

    def stage_email(self, owner_email: str, email: str, site: str) -> str: ...

    def email_for_token(self, token: str) -> Optional[str]: ...

    def complete_user_creation(self, token: str, password_hash: str) -> Optional[str]: ...

    def complete_email_addition(self, token: str) -> Optional[str]: ...

    def registration_status(self, token: Optional[str], email: str) -> RegistrationStatus: ...

    def password_hash(self, email: str) -> Optional[str]: ...

    def list_emails(self, email: str) -> List[str]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Confirmation links (and unread completions) older than this are forgotten.
DEFAULT_STAGING_TTL = timedelta(days=2)


class InMemoryAccountStore:
    """
    Process-local account store (development and tests).

    A completion is reported as "complete" once; afterwards the token is unknown.
    Staged emails and unreported completions expire after `staging_ttl`.
    """

    def __init__(
        self, *, staging_ttl: timedelta = DEFAULT_STAGING_TTL, clock: Callable[[], datetime] = _utcnow
    ) -> None:
        self._lock = threading.Lock()
        self._next_id = 1
        self._accounts: Dict[int, Account] = {}
        self._owner: Dict[str, int] = {}
        self._staged: Dict[str, StagedEmail] = {}
        # token -> (email, completed_at)
        self._completed: Dict[str, Tuple[str, datetime]] = {}
        self._staging_ttl = staging_ttl
        self._clock = clock

    def _prune_locked(self) -> None:
        cutoff = self._clock() - self._staging_ttl
        for token in [t for t, s in self._staged.items() if s.staged_at < cutoff]:
            del self._staged[token]
        for token in [t for t, (_, at) in self._completed.items() if at < cutoff]:
            del self._completed[token]

    def _account_for(self, email: str) -> Optional[Account]:
        user_id = self._owner.get(email.lower())
        return self._accounts.get(user_id) if user_id is not None else None

    def email_known(self, email: str) -> bool:
        with self._lock:
            return email.lower() in self._owner

    def _stage(self, email: str, site: str, owner_email: Optional[str]) -> str:
        token = random_token(24)
        with self._lock:
            self._prune_locked()
            self._staged[token] = StagedEmail(
                token=token,
                email=email.lower(),
                site=site,
                owner_email=owner_email.lower() if owner_email else None,
                staged_at=self._clock(),
            )
        return token

    def stage_user(self, email: str, site: str) -> str:
        # Staging a known email is a password reset; completion replaces the password.
        return self._stage(email, site, None)

    def stage_email(self, owner_email: str, email: str, site: str) -> str:
        return self._stage(email, site, owner_email)

    def email_for_token(self, token: str) -> Optional[str]:
        with self._lock:
            self._prune_locked()
            staged = self._staged.get(token)
            return staged.email if staged else None

    def complete_user_creation(self, token: str, password_hash: str) -> Optional[str]:
        with self._lock:
            self._prune_locked()
            staged = self._staged.get(token)
            if staged is None or staged.owner_email is not None:
                return None
            del self._staged[token]
            account = self._account_for(staged.email)
            if account is None:
                account = Account(user_id=self._next_id, password_hash=password_hash, emails=[staged.email])
                self._next_id += 1
                self._accounts[account.user_id] = account
                self._owner[staged.email] = account.user_id
            else:
                account.password_hash = password_hash
            self._completed[token] = (staged.email, self._clock())
            return staged.email

    def complete_email_addition(self, token: str) -> Optional[str]:
        with self._lock:
            self._prune_locked()
            staged = self._staged.get(token)
            if staged is None or staged.owner_email is None:
                return None
            account = self._account_for(staged.owner_email)
            if account is None:
                return None
            del self._staged[token]
            previous = self._account_for(staged.email)
            if previous is not None and previous is not account:
                previous.emails.remove(staged.email)
            if staged.email not in account.emails:
                account.emails.append(staged.email)
            self._owner[staged.email] = account.user_id
            self._completed[token] = (staged.email, self._clock())
            return staged.email

    def registration_status(self, token: Optional[str], email: str) -> RegistrationStatus:
        if not token:
            return "noRegistration"
        email = email.lower()
        with self._lock:
            self._prune_locked()
            completed = self._completed.get(token)
            if completed is not None and completed[0] == email:
                del self._completed[token]
                return "complete"
            staged = self._staged.get(token)
            if staged is not None and staged.email == email:
                return "pending"
        return "noRegistration"

    def password_hash(self, email: str) -> Optional[str]:
        with self._lock:
            account = self._account_for(email)
            return account.password_hash if account else None

    def list_emails(self, email: str) -> List[str]:
        with self._lock:
            account = self._account_for(email)
            return list(account.emails) if account else []
