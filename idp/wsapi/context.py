from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from fastapi import Request

from idp.accounts.mailer import LogMailer, Mailer
from idp.accounts.store import AccountStore, InMemoryAccountStore
from idp.auth.config import IdpConfig
from idp.auth.session import Session


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Services:
    """Collaborators shared by every operation for the lifetime of the app."""

    accounts: AccountStore = field(default_factory=InMemoryAccountStore)
    mailer: Mailer = field(default_factory=LogMailer)
    clock: Callable[[], datetime] = _utcnow


@dataclass
class OperationContext:
    request: Request
    session: Session
    # Query parameters for GET, decoded body for POST.
    params: Dict[str, Any]
    config: IdpConfig
    services: Services

    def param(self, name: str) -> str:
        return str(self.params.get(name) or "").strip()
