"""
Identity provider wsapi server.

Serves the session/authentication API under /wsapi/ behind the WsapiRouter
middleware. Everything outside /wsapi is session-agnostic.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import FastAPI

from idp.api.router import WsapiRouter
from idp.auth.config import IdpConfig, load_config
from idp.wsapi.context import Services
from idp.wsapi.registry import OperationRegistry, build_registry

logger = logging.getLogger(__name__)


def create_app(
    cfg: Optional[IdpConfig] = None,
    *,
    registry: Optional[OperationRegistry] = None,
    services: Optional[Services] = None,
) -> FastAPI:
    """
    Build the application.

    The registry is built here so a bad handler registration prevents startup.
    """
    cfg = cfg or load_config()
    registry = registry if registry is not None else build_registry(cfg.api_mode)
    services = services or Services()

    app = FastAPI(title="Identity provider wsapi")
    app.state.config = cfg
    app.state.registry = registry
    app.state.services = services
    app.middleware("http")(WsapiRouter(cfg, registry, services))

    @app.get("/healthz")
    def healthz() -> Dict[str, Any]:
        return {"ok": True}

    logger.info(
        "wsapi ready: mode=%s operations=%d over_ssl=%s", cfg.api_mode, len(registry.operations), cfg.over_ssl
    )
    return app


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    import uvicorn

    # Configure logging for the application
    log_level = os.getenv("LOG_LEVEL", "info").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Map Python logging levels to uvicorn log levels
    uvicorn_log_level = (
        log_level.lower() if log_level.lower() in ["critical", "error", "warning", "info", "debug", "trace"] else "info"
    )

    app = create_app()
    logger.info("Starting wsapi server on %s:%d (log_level=%s)", host, port, log_level)
    uvicorn.run(app, host=host, port=port, log_level=uvicorn_log_level)
