from __future__ import annotations

import os
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from licreg.api.errors import install_error_handlers
from licreg.api.routes_public import public_router
from licreg.api.structured_logging import RequestLogMiddleware
from licreg.runtime.executor import build_executor as _build_executor


def build_executor():
    """Build a LicenseExecutor for the API runtime.

    This wrapper exists so tests can monkeypatch `licreg.api.app.build_executor`
    without reaching into runtime modules.
    """
    return _build_executor()


def _parse_cors_origins() -> List[str]:
    """Parse CORS origins with production-safe defaults.

    Policy:
      - If LICREG_CORS_ORIGINS is unset/empty -> CORS disabled
      - Wildcard "*" is rejected in LICREG_MODE=prod
    """
    raw = os.environ.get("LICREG_CORS_ORIGINS", "").strip()
    mode = os.environ.get("LICREG_MODE", "prod").strip().lower()

    if not raw:
        return []

    origins = [o.strip() for o in raw.split(",") if o.strip()]

    if "*" in origins:
        if mode == "prod":
            raise RuntimeError(
                "Unsafe CORS configuration: wildcard '*' not allowed in production. "
                "Set explicit origins in LICREG_CORS_ORIGINS."
            )
        return ["*"]

    return origins


def create_app(*, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    boot_runtime:
      - True (default): load contract config + attach executor
      - False: keep lightweight; callers attach app.state.executor themselves
    """
    mode = os.environ.get("LICREG_MODE", "prod").strip().lower()

    # Disable docs in production.
    if mode == "prod":
        app = FastAPI(title="License Registry API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="License Registry API")

    app.state.executor = build_executor() if boot_runtime else None

    app.add_middleware(RequestLogMiddleware)

    cors_origins = _parse_cors_origins()
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=cors_origins != ["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type"],
        )

    install_error_handlers(app)
    app.include_router(public_router)

    return app
