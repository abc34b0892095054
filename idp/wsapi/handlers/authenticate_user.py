from __future__ import annotations

import logging

from fastapi.responses import JSONResponse

from idp.auth.passwords import verify_password
from idp.auth.session import clear_authenticated_user, set_authenticated_user
from idp.wsapi.context import OperationContext

logger = logging.getLogger(__name__)

method = "post"
authed = False
writes_db = False
args = ["email", "pass"]


def process(ctx: OperationContext) -> JSONResponse:
    email = ctx.param("email").lower()
    password = str(ctx.params.get("pass") or "")

    password_hash = ctx.services.accounts.password_hash(email)
    if password_hash is None or not verify_password(password, password_hash):
        logger.info("Failed authentication for %s", email)
        clear_authenticated_user(ctx.session)
        return JSONResponse(content={"success": False})

    set_authenticated_user(ctx.session, email, now=ctx.services.clock())
    return JSONResponse(content={"success": True})
