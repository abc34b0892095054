from __future__ import annotations

from enum import Enum


class ErrorAction(str, Enum):
    """Categorized action tags for the error panel."""

    RELAY_SETUP = "relaySetup"
    CHECK_AUTHENTICATION = "checkAuthentication"
    SIGN_IN = "signIn"
    GET_ASSERTION = "getAssertion"
    LOGOUT_USER = "logoutUser"
    CHECK_REGISTRATION = "checkRegistration"
    XHR_ERROR = "xhrError"

    @property
    def title(self) -> str:
        return _TITLES[self]


_TITLES = {
    ErrorAction.RELAY_SETUP: "Establishing a relay with the requesting site",
    ErrorAction.CHECK_AUTHENTICATION: "Checking your authentication status",
    ErrorAction.SIGN_IN: "Signing you in",
    ErrorAction.GET_ASSERTION: "Getting an assertion for your email address",
    ErrorAction.LOGOUT_USER: "Signing you out",
    ErrorAction.CHECK_REGISTRATION: "Checking the confirmation of your email address",
    ErrorAction.XHR_ERROR: "Communicating with the server",
}
