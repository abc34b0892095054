from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.wsapi.context import OperationContext

method = "post"
authed = False
writes_db = True
args = ["token"]


def process(ctx: OperationContext) -> JSONResponse:
    email = ctx.services.accounts.complete_email_addition(ctx.param("token"))
    return JSONResponse(content={"success": email is not None})
