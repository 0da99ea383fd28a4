from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from licreg.api.routes_public_parts.common import _snapshot
from licreg.ledger.certificate import certificate_text
from licreg.ledger.registry import ensure_contract, issuance_count

router = APIRouter()

Json = Dict[str, Any]


@router.get("/contract")
def v1_contract(request: Request) -> Json:
    st = _snapshot(request)
    c = ensure_contract(st)
    return {
        "ok": True,
        "contract": {
            "contract_id": c.get("contract_id", ""),
            "issuer": c.get("issuer", ""),
            "root": c.get("root", ""),
            "issuer_name": c.get("issuer_name", ""),
            "liability": c.get("liability", ""),
            "safekeeping_period": int(c.get("safekeeping_period", 0) or 0),
            "issuer_certificate": c.get("issuer_certificate", ""),
            "signed": bool(c.get("signed", False)),
            "signature": c.get("signature", ""),
            "disabled": bool(c.get("disabled", False)),
            "issuance_fee": int(c.get("issuance_fee", 0) or 0),
            "fees_collected": int(c.get("fees_collected", 0) or 0),
        },
        "certificate_text": certificate_text(c),
        "issuance_count": issuance_count(st),
    }
