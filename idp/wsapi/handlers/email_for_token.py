from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.wsapi.context import OperationContext

method = "get"
authed = False
writes_db = False
args = ["token"]


def process(ctx: OperationContext) -> JSONResponse:
    return JSONResponse(content={"email": ctx.services.accounts.email_for_token(ctx.param("token"))})
