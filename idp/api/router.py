from __future__ import annotations

import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Dict

from fastapi import Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from idp.api.httputils import bad_request
from idp.auth.config import IdpConfig
from idp.auth.csrf import csrf_violation, in_wsapi_namespace
from idp.auth.gate import is_authenticated
from idp.auth.session import COOKIE_KEY, Session, load_session, persist_session, session_cookie_kwargs
from idp.wsapi.context import OperationContext, Services
from idp.wsapi.registry import OperationRegistry

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]

NO_CACHE = "no-cache, max-age=0"


async def _request_body(request: Request) -> Dict[str, Any]:
    content_type = (request.headers.get("content-type") or "").split(";", 1)[0].strip().lower()
    if content_type == "application/json":
        try:
            data = await request.json()
        except (ValueError, UnicodeDecodeError):
            return {}
        return data if isinstance(data, dict) else {}
    if content_type in ("application/x-www-form-urlencoded", "multipart/form-data"):
        try:
            form = await request.form()
        except (HTTPException, MultiPartException):
            return {}
        return {k: v for k, v in form.items() if isinstance(v, str)}
    return {}


class WsapiRouter:
    """
    HTTP middleware guarding and dispatching /wsapi calls.

    Order per request (short-circuiting): cache headers, session, CSRF (POST only),
    operation lookup, authentication, argument validation, process.
    """

    def __init__(self, cfg: IdpConfig, registry: OperationRegistry, services: Services) -> None:
        self.cfg = cfg
        self.registry = registry
        self.services = services

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        start_time = time.time()
        path = request.url.path or ""
        logger.debug("%s %s", request.method, path)
        try:
            if not in_wsapi_namespace(path):
                # POSTs are only ever allowed to /wsapi.
                if request.method == "POST":
                    csrf_violation(path, None, None)
                    response: Response = bad_request()
                else:
                    response = await call_next(request)
            else:
                session = load_session(self.cfg, request.cookies.get(COOKIE_KEY))
                response = await self._dispatch(request, session)
                # Operations may set their own caching policy.
                response.headers.setdefault("Cache-Control", NO_CACHE)
                response.set_cookie(**session_cookie_kwargs(self.cfg, persist_session(self.cfg, session)))

            process_time = time.time() - start_time
            logger.debug("%s %s - %d (%.3fs)", request.method, path, response.status_code, process_time)
            return response
        except Exception as e:
            process_time = time.time() - start_time
            logger.exception("%s %s - ERROR after %.3fs: %s", request.method, path, process_time, str(e))
            raise

    async def _dispatch(self, request: Request, session: Session) -> Response:
        path = request.url.path
        if request.method == "POST":
            params = await _request_body(request)
            if csrf_violation(path, session, params.get("csrf")) is not None:
                return bad_request()
        else:
            params = dict(request.query_params)

        op = self.registry.resolve(path, request.method)
        if op is None:
            logger.debug("no such api: %s %s", request.method, path)
            return bad_request()

        if op.authed and not is_authenticated(
            session, self.cfg.authentication_duration_ms, now=self.services.clock()
        ):
            return bad_request()

        problem = op.validate(params)
        if problem is not None:
            return bad_request(problem)

        ctx = OperationContext(
            request=request,
            session=session,
            params=params,
            config=self.cfg,
            services=self.services,
        )
        if inspect.iscoroutinefunction(op.process):
            return await op.process(ctx)
        # Handlers may block (bcrypt); keep them off the event loop.
        return await run_in_threadpool(op.process, ctx)
