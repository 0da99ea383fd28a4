from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from licreg.api.structured_logging import note_ledger_error
from licreg.runtime.errors import LedgerError


@dataclass(frozen=True, slots=True)
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})


_LEDGER_STATUS = {
    "forbidden": 403,
    "not_found": 404,
    "invalid_state": 409,
    "insufficient_balance": 409,
    "arithmetic": 400,
    "invalid_payload": 400,
    "tx_unimplemented": 400,
    "invalid_envelope": 400,
}


def api_error_from_ledger(e: LedgerError) -> ApiError:
    status = _LEDGER_STATUS.get(e.code, 400)
    details = e.details if isinstance(e.details, dict) else ({} if e.details is None else {"details": e.details})
    return ApiError(status, e.code, e.reason, details)


def _error_body(err: ApiError) -> Dict[str, Any]:
    return {"ok": False, "error": {"code": err.code, "message": err.message, "details": err.details}}


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(_request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(LedgerError)
    async def _ledger_error(request: Request, exc: LedgerError) -> JSONResponse:
        note_ledger_error(request, exc.code, exc.reason)
        err = api_error_from_ledger(exc)
        return JSONResponse(status_code=err.status_code, content=_error_body(err))
