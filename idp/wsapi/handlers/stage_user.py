"""
Stage a new account (or a password reset for a known email) pending email confirmation.

The staging token is remembered in the session so that only this browser can observe
the confirmation through user_creation_status.
"""

from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.auth.session import PENDING_CREATION, clear_authenticated_user
from idp.wsapi.context import OperationContext

method = "post"
authed = False
writes_db = True
args = ["email", "site"]


def process(ctx: OperationContext) -> JSONResponse:
    email = ctx.param("email").lower()
    site = ctx.param("site")
    if "@" not in email:
        return JSONResponse(content={"success": False, "reason": "invalid email"}, status_code=400)

    # Staging always signs the browser out; it will be signed in again on confirmation.
    clear_authenticated_user(ctx.session)
    token = ctx.services.accounts.stage_user(email, site)
    ctx.session[PENDING_CREATION] = token
    ctx.services.mailer.send_verification(email, token, site, "new_user")
    return JSONResponse(content={"success": True})
