from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.auth.session import clear_authenticated_user
from idp.wsapi.context import OperationContext

method = "post"
authed = True
writes_db = False


def process(ctx: OperationContext) -> JSONResponse:
    clear_authenticated_user(ctx.session)
    return JSONResponse(content={"success": True})
