# src/licreg/api/structured_logging.py
"""JSONL logging for the API process.

Every request produces one `http_request` line. Tx submissions also carry the
ledger context the route and the error handlers attach to `request.state`
(tx type, target issuance, ledger error code), so an access log line can be
joined with the executor's `tx_applied` / `tx_rejected` lines.
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from licreg.runtime.runtime_logging import log_event

Json = Dict[str, Any]

_HANDLER_NAME = "licreg-jsonl"
_OFF = {"0", "false", "no", "n", "off"}


def configure_structured_logging(level_name: Optional[str] = None) -> None:
    """Route all loggers to a single stdout handler emitting raw JSONL.

    Level comes from the argument, else LICREG_LOG_LEVEL (default INFO).
    Calling it again only adjusts the level.
    """
    name = (level_name or os.environ.get("LICREG_LOG_LEVEL") or "INFO").strip().upper()
    level = getattr(logging, name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers:
        if h.get_name() == _HANDLER_NAME:
            h.setLevel(level)
            return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.handlers = [handler]


def note_tx(request: Request, *, tx_type: Optional[str] = None, issuance_id: Optional[int] = None) -> None:
    """Attach tx context to the request for the access log line."""
    if tx_type is not None:
        request.state.tx_type = tx_type
    if issuance_id is not None:
        request.state.issuance_id = issuance_id


def note_ledger_error(request: Request, code: str, reason: str) -> None:
    request.state.ledger_code = code
    request.state.ledger_reason = reason


def _ledger_context(request: Request) -> Json:
    st = request.state
    issuance_id = getattr(st, "issuance_id", None)
    if issuance_id is None:
        raw = request.scope.get("path_params", {}).get("issuance_id")
        issuance_id = int(raw) if isinstance(raw, str) and raw.isdigit() else None
    return {
        "tx_type": getattr(st, "tx_type", None),
        "issuance_id": issuance_id,
        "ledger_code": getattr(st, "ledger_code", None),
        "ledger_reason": getattr(st, "ledger_reason", None),
    }


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One `http_request` line per request on logger `licreg.http`.

    LICREG_LOG_REQUESTS=0 turns it off. The request id is taken from the
    `x-request-id` header when the client sends one and echoed back.
    """

    def __init__(self, app) -> None:
        super().__init__(app)
        self._enabled = (os.environ.get("LICREG_LOG_REQUESTS") or "1").strip().lower() not in _OFF
        self._logger = logging.getLogger("licreg.http")

    async def dispatch(self, request: Request, call_next):
        if not self._enabled:
            return await call_next(request)

        started = time.monotonic()
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id

        status = 500
        err: Optional[str] = None
        try:
            response = await call_next(request)
            status = int(response.status_code)
            response.headers.setdefault("x-request-id", request_id)
            return response
        except Exception as e:
            err = f"{type(e).__name__}: {e}"
            raise
        finally:
            log_event(
                self._logger,
                "http_request",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status=status,
                duration_ms=int((time.monotonic() - started) * 1000),
                error=err,
                **_ledger_context(request),
            )


__all__ = ["configure_structured_logging", "note_ledger_error", "note_tx", "RequestLogMiddleware"]
