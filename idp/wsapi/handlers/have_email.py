from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.wsapi.context import OperationContext

method = "get"
authed = False
writes_db = False
args = ["email"]


def process(ctx: OperationContext) -> JSONResponse:
    return JSONResponse(content={"email_known": ctx.services.accounts.email_known(ctx.param("email"))})
