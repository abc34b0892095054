from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.auth.session import PENDING_CREATION, set_authenticated_user
from idp.wsapi.context import OperationContext

method = "get"
authed = False
writes_db = False
args = ["email"]


def process(ctx: OperationContext) -> JSONResponse:
    email = ctx.param("email").lower()
    status = ctx.services.accounts.registration_status(ctx.session.get(PENDING_CREATION), email)
    if status == "complete":
        del ctx.session[PENDING_CREATION]
        set_authenticated_user(ctx.session, email, now=ctx.services.clock())
    elif status == "noRegistration":
        ctx.session.pop(PENDING_CREATION, None)
    return JSONResponse(content={"status": status})
