from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Protocol
from urllib.parse import urlparse

from idp.dialog.network import Network

logger = logging.getLogger(__name__)


class AssertionSigner(Protocol):
    """Produces the signed identity assertion. Its format is not this package's concern."""

    def sign(self, email: str, audience: str) -> Optional[str]: ...


class User:
    """
    Account-side operations of the dialog, on top of the wsapi client.

    Confirmation polling (`wait_for_*_validation`) has no timeout of its own; the caller
    abandons it when the flow ends.
    """

    def __init__(self, network: Network, signer: AssertionSigner, *, poll_interval: float = 3.0) -> None:
        self.network = network
        self.signer = signer
        self.poll_interval = poll_interval
        self.origin: Optional[str] = None
        self.emails: List[str] = []

    def set_origin(self, origin: str) -> None:
        self.origin = origin

    def get_hostname(self) -> str:
        return urlparse(self.origin or "").hostname or (self.origin or "")

    async def check_authentication_and_sync(self) -> bool:
        ctx = await self.network.session_context()
        if not ctx.authenticated:
            self.emails = []
            return False
        await self.sync_emails()
        return True

    async def sync_emails(self) -> None:
        self.emails = await self.network.list_emails()

    async def authenticate(self, email: str, password: str) -> bool:
        ok = await self.network.authenticate_user(email, password)
        if ok:
            await self.sync_emails()
        return ok

    async def create_user(self, email: str) -> bool:
        return await self.network.stage_user(email, self.get_hostname())

    async def add_email(self, email: str) -> bool:
        return await self.network.stage_email(email, self.get_hostname())

    async def logout_user(self) -> None:
        await self.network.logout()
        self.emails = []

    async def get_assertion(self, email: str) -> Optional[str]:
        """Assertion for `email` scoped to the current origin; None if the email is not ours."""
        if email.lower() not in self.emails:
            await self.sync_emails()
        if email.lower() not in self.emails:
            logger.info("No assertion: %s is not an email of the signed-in user", email)
            return None
        return self.signer.sign(email.lower(), self.origin or "")

    async def _poll(self, check, email: str) -> str:  # type: ignore[no-untyped-def]
        while True:
            status = await check(email)
            if status != "pending":
                return status
            await asyncio.sleep(self.poll_interval)

    async def wait_for_user_validation(self, email: str) -> str:
        status = await self._poll(self.network.user_creation_status, email)
        if status == "complete":
            await self.sync_emails()
        return status

    async def wait_for_email_validation(self, email: str) -> str:
        status = await self._poll(self.network.email_addition_status, email)
        if status == "complete":
            await self.sync_emails()
        return status
