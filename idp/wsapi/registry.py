from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple, Union

from fastapi import Response

from idp.wsapi.validate import Validator, validator

logger = logging.getLogger(__name__)

WSAPI_PREFIX = "/wsapi/"
METHODS = ("get", "post")

ProcessFn = Callable[[Any], Union[Response, Awaitable[Response]]]


class RegistrationError(RuntimeError):
    """A handler could not be registered. Fatal at startup."""


@dataclass(frozen=True)
class Operation:
    name: str
    method: str
    process: ProcessFn
    authed: bool = False
    writes_db: bool = False
    args: Tuple[str, ...] = ()
    validate: Validator = field(default=validator(()), compare=False, repr=False)


def _operation_from_handler(name: str, handler: Any) -> Operation:
    process = getattr(handler, "process", None)
    if not callable(process):
        raise RegistrationError("handler must expose a callable process")

    method = str(getattr(handler, "method", "") or "").lower()
    if method not in METHODS:
        raise RegistrationError(f"method must be one of {METHODS}, got {method!r}")

    args = getattr(handler, "args", None)
    if args is None:
        args = ()
    elif not isinstance(args, (list, tuple)) or not all(isinstance(a, str) for a in args):
        raise RegistrationError("args must be a list of strings")

    return Operation(
        name=name,
        method=method,
        process=process,
        authed=bool(getattr(handler, "authed", False)),
        writes_db=bool(getattr(handler, "writes_db", False)),
        args=tuple(args),
        validate=validator(args),
    )


@dataclass
class OperationRegistry:
    """
    Operations served under /wsapi/, keyed by name.

    mode:
    - "all": register everything
    - "read": skip operations that write the database (read replicas)
    - "write": register only operations that write the database
    """

    mode: str = "all"
    operations: Dict[str, Operation] = field(default_factory=dict)

    def register(self, name: str, handler: Any) -> Optional[Operation]:
        """Register `handler` as `name`; returns None when the mode excludes it."""
        if not name or "/" in name:
            raise RegistrationError(f"invalid operation name {name!r}")
        if name in self.operations:
            raise RegistrationError(f"operation {name!r} is already registered")

        op = _operation_from_handler(name, handler)
        if self.mode == "read" and op.writes_db:
            return None
        if self.mode == "write" and not op.writes_db:
            return None
        self.operations[name] = op
        return op

    def resolve(self, path: str, method: str) -> Optional[Operation]:
        """
        Find the operation for a request.

        Unknown names and method mismatches both resolve to None so callers cannot tell
        them apart.
        """
        if not path.startswith(WSAPI_PREFIX):
            return None
        op = self.operations.get(path[len(WSAPI_PREFIX) :])
        if op is None or op.method != (method or "").lower():
            return None
        return op


def build_registry(mode: str = "all", handlers: Optional[Sequence[Tuple[str, Any]]] = None) -> OperationRegistry:
    """
    Build the registry from the static handler list.

    Any failure aborts: a server with a partially registered API must not start.
    """
    if handlers is None:
        from idp.wsapi.handlers import DEFAULT_HANDLERS

        handlers = DEFAULT_HANDLERS

    reg = OperationRegistry(mode=mode)
    logger.debug("registering WSAPIs (mode=%s):", mode)
    for name, handler in handlers:
        try:
            op = reg.register(name, handler)
        except Exception as e:
            msg = f"error registering {name} api: {e}"
            logger.error(msg)
            raise RegistrationError(msg) from e
        if op is not None:
            logger.debug("  %s", name)
    return reg
