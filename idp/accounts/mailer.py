from __future__ import annotations

import logging
from typing import Literal, Protocol

logger = logging.getLogger(__name__)

VerificationKind = Literal["new_user", "add_email"]


class Mailer(Protocol):
    def send_verification(self, email: str, token: str, site: str, kind: VerificationKind) -> None:
        """Deliver the confirmation link for a staged email."""


class LogMailer:
    """Writes verification notices to the log instead of sending mail (development)."""

    def send_verification(self, email: str, token: str, site: str, kind: VerificationKind) -> None:
        logger.info("Verification (%s) issued for %s on behalf of %s", kind, email, site)
        logger.debug("Verification token for %s: %s", email, token)
