from __future__ import annotations

from fastapi.responses import JSONResponse

from idp.auth.passwords import hash_password
from idp.auth.session import set_authenticated_user
from idp.wsapi.context import OperationContext

method = "post"
authed = False
writes_db = True
args = ["token", "pass"]

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 80


def process(ctx: OperationContext) -> JSONResponse:
    password = str(ctx.params.get("pass") or "")
    if not (MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH):
        return JSONResponse(content={"success": False, "reason": "password length"}, status_code=400)

    password_hash = hash_password(password, ctx.config.bcrypt_work_factor)
    email = ctx.services.accounts.complete_user_creation(ctx.param("token"), password_hash)
    if email is None:
        return JSONResponse(content={"success": False})

    # The verifying browser is signed in as the freshly confirmed user.
    set_authenticated_user(ctx.session, email, now=ctx.services.clock())
    return JSONResponse(content={"success": True})
