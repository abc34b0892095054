"""Stage a secondary email for the signed-in account, pending confirmation."""

from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.auth.session import AUTHENTICATED_USER, PENDING_ADDITION
from idp.wsapi.context import OperationContext

method = "post"
authed = True
writes_db = True
args = ["email", "site"]


def process(ctx: OperationContext) -> JSONResponse:
    email = ctx.param("email").lower()
    site = ctx.param("site")
    if "@" not in email:
        return JSONResponse(content={"success": False, "reason": "invalid email"}, status_code=400)

    token = ctx.services.accounts.stage_email(ctx.session[AUTHENTICATED_USER], email, site)
    ctx.session[PENDING_ADDITION] = token
    ctx.services.mailer.send_verification(email, token, site, "add_email")
    return JSONResponse(content={"success": True})
