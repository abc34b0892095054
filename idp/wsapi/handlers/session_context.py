"""Bootstrap a dialog: hands out the CSRF token and reports whether the session is signed in."""

from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.auth.gate import is_authenticated
from idp.wsapi.context import OperationContext

method = "get"
authed = False
writes_db = False


def process(ctx: OperationContext) -> JSONResponse:
    now = ctx.services.clock()
    user = is_authenticated(ctx.session, ctx.config.authentication_duration_ms, now=now)
    return JSONResponse(
        content={
            "csrf_token": ctx.session.csrf,
            "authenticated": user is not None,
            "server_time": int(now.timestamp() * 1000),
        }
    )
