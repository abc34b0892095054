from __future__ import annotations

from typing import Any, Dict, Optional, Protocol


class DialogView(Protocol):
    """
    Presentation collaborator. Rendering and DOM binding live behind this interface.
    """

    def render_error(self, template: str, info: Dict[str, Any]) -> None:
        """Show the error (or "offline") panel."""

    def set_site_name(self, hostname: str) -> None:
        """Show which site is asking for an identity."""

    def authenticate(self, email: Optional[str] = None) -> None:
        """Show the sign-in panel, optionally pre-filled."""

    def pick_email(self, origin: str) -> None:
        """Show the email picker for `origin`."""

    def check_registration(self, email: str) -> None:
        """Show the "check your email" panel while confirmation is pending."""


class UserService(Protocol):
    """Account collaborator. Network failures surface as exceptions."""

    def set_origin(self, origin: str) -> None: ...

    def get_hostname(self) -> str: ...

    async def check_authentication_and_sync(self) -> bool: ...

    async def sync_emails(self) -> None: ...

    async def get_assertion(self, email: str) -> Optional[str]: ...

    async def logout_user(self) -> None: ...

    async def wait_for_user_validation(self, email: str) -> str: ...

    async def wait_for_email_validation(self, email: str) -> str: ...


class Controller:
    """Base for page controllers bound to a view."""

    def __init__(self, view: DialogView) -> None:
        self.view: Optional[DialogView] = view
        self.destroyed = False

    def destroy(self) -> None:
        self.view = None
        self.destroyed = True
