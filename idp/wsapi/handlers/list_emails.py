from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.auth.session import AUTHENTICATED_USER
from idp.wsapi.context import OperationContext

method = "get"
authed = True
writes_db = False


def process(ctx: OperationContext) -> JSONResponse:
    return JSONResponse(content={"emails": ctx.services.accounts.list_emails(ctx.session[AUTHENTICATED_USER])})
