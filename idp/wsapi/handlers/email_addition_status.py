from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.auth.session import PENDING_ADDITION
from idp.wsapi.context import OperationContext

method = "get"
authed = False
writes_db = False
args = ["email"]


def process(ctx: OperationContext) -> JSONResponse:
    status = ctx.services.accounts.registration_status(ctx.session.get(PENDING_ADDITION), ctx.param("email"))
    if status != "pending":
        ctx.session.pop(PENDING_ADDITION, None)
    return JSONResponse(content={"status": status})
