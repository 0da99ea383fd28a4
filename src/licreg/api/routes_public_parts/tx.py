from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from licreg.api.routes_public_parts.common import _executor
from licreg.api.schemas import TxSubmitRequest
from licreg.api.structured_logging import note_tx
from licreg.runtime.tx_admission_types import TxEnvelope

router = APIRouter()

Json = Dict[str, Any]


@router.post("/tx/submit")
def tx_submit(body: TxSubmitRequest, request: Request) -> Json:
    """Apply one tx envelope.

    The signer is taken as-is: authenticating it is the host's job. A rejected
    tx surfaces as an error response mapped from its LedgerError; nothing is
    committed in that case.

    Returns:
      { ok, meta }
    """
    env = TxEnvelope.from_json(body.model_dump())
    note_tx(request, tx_type=env.tx_type, issuance_id=env.issuance_id)

    meta = _executor(request).apply(env)
    # LICENSE_ISSUE learns its issuance id only once applied.
    note_tx(request, issuance_id=meta.get("issuance_id"))
    return {"ok": True, "meta": meta}
