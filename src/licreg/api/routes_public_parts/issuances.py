from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from licreg.api.routes_public_parts.common import _snapshot
from licreg.ledger.registry import IssuanceRegistry

router = APIRouter()

Json = Dict[str, Any]


@router.get("/issuances")
def v1_issuances(request: Request) -> Json:
    registry = IssuanceRegistry(_snapshot(request))
    return {"ok": True, "count": len(registry), "issuances": [iss.summary() for iss in registry]}


@router.get("/issuances/{issuance_id}")
def v1_issuance_get(issuance_id: int, request: Request) -> Json:
    iss = IssuanceRegistry(_snapshot(request)).get(issuance_id)
    out = iss.summary()
    out["destroyed_supply"] = iss.destroyed_supply()
    return {"ok": True, "issuance": out}


@router.get("/issuances/{issuance_id}/balances/{owner}")
def v1_balance(issuance_id: int, owner: str, request: Request) -> Json:
    iss = IssuanceRegistry(_snapshot(request)).get(issuance_id)
    return {
        "ok": True,
        "issuance_id": issuance_id,
        "owner": owner,
        "balance": iss.balance_of(owner),
        "outright": iss.cell(owner, owner),
        "reclaimable": iss.reclaimable_balance_of(owner),
        "revoked": iss.revoked,
    }


@router.get("/issuances/{issuance_id}/balances/{owner}/reclaimable/{reclaimer}")
def v1_reclaimable_by(issuance_id: int, owner: str, reclaimer: str, request: Request) -> Json:
    iss = IssuanceRegistry(_snapshot(request)).get(issuance_id)
    return {
        "ok": True,
        "issuance_id": issuance_id,
        "owner": owner,
        "reclaimer": reclaimer,
        "reclaimable": iss.reclaimable_balance_by(owner, reclaimer),
    }
