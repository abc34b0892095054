from __future__ import annotations

from typing import Optional

from fastapi.responses import PlainTextResponse


def bad_request(detail: Optional[str] = None) -> PlainTextResponse:
    """
    400 response. Denials carry no detail; only argument errors describe what was wrong.
    """
    body = "Bad Request" if not detail else f"Bad Request: {detail}"
    return PlainTextResponse(body, status_code=400)
