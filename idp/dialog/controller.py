from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from idp.dialog import events as ev
from idp.dialog.base import Controller, DialogView, UserService
from idp.dialog.errors import ErrorAction
from idp.dialog.machine import transition
from idp.dialog.states import (
    CheckAuth,
    DeliverError,
    DeliverSuccess,
    Effect,
    GetAssertion,
    Init,
    LogoutUser,
    RenderError,
    RenderOffline,
    ShowAuthenticate,
    ShowPickEmail,
    StartConfirmation,
    State,
    SyncEmails,
)

logger = logging.getLogger(__name__)

Payload = Optional[Dict[str, Any]]
Handler = Callable[[Payload], Awaitable[None]]
SuccessCallback = Callable[[Optional[str]], None]
ErrorCallback = Callable[[str], None]


class DialogController(Controller):
    """
    Coordinates one sign-in transaction for a dialog's lifetime.

    Events are routed through an owned name -> handler table; every transition goes
    through `transition()` and its effects are carried out against the view and the
    user service. Collaborator completions are fed back as events, so a completion that
    arrives after the flow moved on (e.g. after cancel) is dropped by the state machine.
    """

    def __init__(
        self,
        view: DialogView,
        user: UserService,
        *,
        setup_channel: Optional[Callable[["DialogController"], None]] = None,
        is_online: Optional[Callable[[], bool]] = None,
    ) -> None:
        super().__init__(view)
        self.user = user
        self.state: State = Init()
        self.onsuccess: Optional[SuccessCallback] = None
        self.onerror: Optional[ErrorCallback] = None
        self._is_online = is_online
        self._handlers: Dict[str, Handler] = {}
        self._tasks: Set["asyncio.Task[None]"] = set()

        try:
            if setup_channel is not None:
                setup_channel(self)
            for name in ev.PUBLIC_EVENTS:
                self.subscribe(name, self._handler_for(name))
        except Exception as e:
            logger.warning("Dialog relay setup failed: %s", e)
            self._apply_sync(ev.FAILURE, {"action": ErrorAction.RELAY_SETUP})

    # ---- subscriptions ----

    def subscribe(self, name: str, handler: Handler) -> None:
        self._handlers[name] = handler

    def _handler_for(self, name: str) -> Handler:
        async def _handle(payload: Payload) -> None:
            await self._dispatch(name, payload)

        return _handle

    @property
    def subscriptions(self) -> Set[str]:
        return set(self._handlers)

    async def publish(self, name: str, payload: Payload = None) -> bool:
        """Deliver an event; returns False when nothing is subscribed to it."""
        handler = self._handlers.get(name)
        if handler is None:
            return False
        await handler(payload)
        return True

    # ---- entry points ----

    async def get_verified_email(
        self, origin: str, onsuccess: SuccessCallback, onerror: Optional[ErrorCallback] = None
    ) -> None:
        self.onsuccess = onsuccess
        self.onerror = onerror

        if self._is_online is not None and not self._is_online():
            await self._dispatch(ev.OFFLINE, None)
            return

        self.user.set_origin(origin)
        if self.view is not None:
            self.view.set_site_name(self.user.get_hostname())
        await self._dispatch(ev.START, None)

    def channel_closed(self, reason: str = "client closed window") -> None:
        """The relay to the requesting site went away before the flow finished."""
        self._apply_sync(ev.CHANNEL_CLOSED, {"reason": reason})

    def destroy(self) -> None:
        self._handlers.clear()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        super().destroy()

    # ---- dispatch ----

    async def _dispatch(self, name: str, payload: Payload) -> None:
        if self.destroyed:
            return
        before = self.state
        self.state, effects = transition(self.state, name, payload)
        if self.state != before:
            logger.debug("dialog: %s --%s--> %s", type(before).__name__, name, type(self.state).__name__)
        for effect in effects:
            await self._perform(effect)

    def _apply_sync(self, name: str, payload: Payload) -> None:
        if self.destroyed:
            return
        self.state, effects = transition(self.state, name, payload)
        for effect in effects:
            self._perform_view(effect)

    def _perform_view(self, effect: Effect) -> bool:
        """Carry out an effect that needs no I/O; returns False for any other effect."""
        if isinstance(effect, DeliverSuccess):
            # Clear onerror before onsuccess: onsuccess may tear down the channel, which
            # would otherwise report an error.
            if effect.assertion is not None:
                self.onerror = None
            if self.onsuccess is not None:
                self.onsuccess(effect.assertion)
        elif isinstance(effect, DeliverError):
            onerror, self.onerror = self.onerror, None
            if onerror is not None:
                onerror(effect.reason)
        elif isinstance(effect, RenderError):
            if self.view is not None:
                info = {"action": effect.action.value, "title": effect.action.title, **effect.info}
                self.view.render_error("error", info)
        elif isinstance(effect, RenderOffline):
            if self.view is not None:
                self.view.render_error("offline", {})
        elif isinstance(effect, ShowAuthenticate):
            if self.view is not None:
                self.view.authenticate(effect.email)
        elif isinstance(effect, ShowPickEmail):
            if self.view is not None:
                self.view.pick_email(self.user.get_hostname())
        else:
            return False
        return True

    async def _perform(self, effect: Effect) -> None:
        if self._perform_view(effect):
            return
        if isinstance(effect, CheckAuth):
            await self._call(ErrorAction.CHECK_AUTHENTICATION, self._check_auth())
        elif isinstance(effect, SyncEmails):
            await self._call(ErrorAction.SIGN_IN, self._sync_emails())
        elif isinstance(effect, GetAssertion):
            await self._call(ErrorAction.GET_ASSERTION, self._get_assertion(effect.email))
        elif isinstance(effect, LogoutUser):
            await self._call(ErrorAction.LOGOUT_USER, self._logout())
        elif isinstance(effect, StartConfirmation):
            if self.view is not None:
                self.view.check_registration(effect.email)
            # Polling runs in the background so cancel stays deliverable meanwhile.
            task = asyncio.create_task(self._call(ErrorAction.CHECK_REGISTRATION, self._confirm(effect)))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait for background confirmation polling to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _call(self, action: ErrorAction, work: Awaitable[None]) -> None:
        try:
            await work
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("dialog: %s failed: %s", action.value, e)
            await self._dispatch(ev.FAILURE, {"action": action, "message": str(e)})

    async def _check_auth(self) -> None:
        authenticated = await self.user.check_authentication_and_sync()
        await self._dispatch(ev.AUTH_CHECKED, {"authenticated": bool(authenticated)})

    async def _sync_emails(self) -> None:
        await self.user.sync_emails()
        await self._dispatch(ev.EMAILS_SYNCED, None)

    async def _get_assertion(self, email: str) -> None:
        assertion = await self.user.get_assertion(email)
        await self._dispatch(ev.ASSERTION_GENERATED, {"assertion": assertion})

    async def _logout(self) -> None:
        await self.user.logout_user()
        await self._dispatch(ev.LOGGED_OUT, None)

    async def _confirm(self, effect: StartConfirmation) -> None:
        status = await getattr(self.user, effect.verifier)(effect.email)
        if status != "complete":
            raise RuntimeError(f"registration status {status!r} for {effect.email}")
        # Through the table: once destroyed, the confirmation is dropped.
        await self.publish(effect.message, {"email": effect.email})
