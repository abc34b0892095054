"""Async client for the /wsapi operations, as used by the sign-in dialog."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

WSAPI = "/wsapi"


class NetworkError(RuntimeError):
    """A wsapi call failed (transport error, non-2xx status, or unexpected payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionContext(BaseModel):
    csrf_token: str
    authenticated: bool
    server_time: int


class SuccessResult(BaseModel):
    success: bool


class StatusResult(BaseModel):
    status: Literal["complete", "pending", "noRegistration"]


class EmailsResult(BaseModel):
    emails: List[str]


class Network:
    """
    Thin wrapper over an httpx.AsyncClient pointed at the identity provider.

    The client's cookie jar carries the session; the CSRF token is fetched once through
    session_context and added to every POST body.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client
        self._csrf: Optional[str] = None

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, operation: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{WSAPI}/{operation}"
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(f"{operation}: {e}") from e
        if resp.status_code >= 400:
            raise NetworkError(f"{operation}: HTTP {resp.status_code}", status_code=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise NetworkError(f"{operation}: invalid JSON response") from e
        if not isinstance(data, dict):
            raise NetworkError(f"{operation}: unexpected response")
        return data

    async def _get(self, operation: str, **params: Any) -> Dict[str, Any]:
        return await self._request("GET", operation, params=params)

    async def _post(self, operation: str, **body: Any) -> Dict[str, Any]:
        if self._csrf is None:
            await self.session_context()
        return await self._request("POST", operation, json={**body, "csrf": self._csrf})

    @staticmethod
    def _parse(model: type, data: Dict[str, Any]) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise NetworkError(f"unexpected response: {e.error_count()} validation error(s)") from e

    async def session_context(self) -> SessionContext:
        ctx = self._parse(SessionContext, await self._get("session_context"))
        self._csrf = ctx.csrf_token
        return ctx

    async def have_email(self, email: str) -> bool:
        data = await self._get("have_email", email=email)
        return bool(data.get("email_known"))

    async def stage_user(self, email: str, site: str) -> bool:
        return self._parse(SuccessResult, await self._post("stage_user", email=email, site=site)).success

    async def user_creation_status(self, email: str) -> str:
        return self._parse(StatusResult, await self._get("user_creation_status", email=email)).status

    async def email_for_token(self, token: str) -> Optional[str]:
        data = await self._get("email_for_token", token=token)
        email = data.get("email")
        return str(email) if email else None

    async def complete_user_creation(self, token: str, password: str) -> bool:
        data = await self._post("complete_user_creation", token=token, **{"pass": password})
        return self._parse(SuccessResult, data).success

    async def authenticate_user(self, email: str, password: str) -> bool:
        data = await self._post("authenticate_user", email=email, **{"pass": password})
        return self._parse(SuccessResult, data).success

    async def logout(self) -> None:
        await self._post("logout")

    async def list_emails(self) -> List[str]:
        return self._parse(EmailsResult, await self._get("list_emails")).emails

    async def stage_email(self, email: str, site: str) -> bool:
        return self._parse(SuccessResult, await self._post("stage_email", email=email, site=site)).success

    async def email_addition_status(self, email: str) -> str:
        return self._parse(StatusResult, await self._get("email_addition_status", email=email)).status

    async def complete_email_addition(self, token: str) -> bool:
        return self._parse(SuccessResult, await self._post("complete_email_addition", token=token)).success
