# src/licreg/runtime/apply/licenses.py
from __future__ import annotations

from typing import Any, Dict, Optional

from licreg.ledger import events
from licreg.ledger.constants import (
    LICENSE_DESTROY,
    LICENSE_ISSUE,
    LICENSE_RECLAIM,
    LICENSE_REVOKE,
    LICENSE_TRANSFER,
    LICENSE_TRANSFER_RECLAIMABLE,
    NULL_ADDRESS,
    U64_MAX,
)
from licreg.ledger.issuance import Issuance, as_address, as_u64
from licreg.ledger.registry import IssuanceRegistry, ensure_contract
from licreg.runtime.errors import InsufficientBalanceError, LedgerArithmeticError, ValidationError
from licreg.runtime.gates import require_can_issue, require_caller, require_issuer
from licreg.runtime.tx_admission_types import TxEnvelope

Json = Dict[str, Any]


def _as_dict(v: Any) -> Json:
    return v if isinstance(v, dict) else {}


def _as_text(v: Any, *, field: str) -> str:
    if v is None:
        return ""
    if not isinstance(v, str):
        raise ValidationError("text_required", {"field": field, "type": type(v).__name__})
    return v


def _issuance(state: Json, payload: Json) -> Issuance:
    return IssuanceRegistry(state).get(payload.get("issuance_id"))


def _apply_license_issue(state: Json, env: TxEnvelope) -> Json:
    caller = require_caller(env.signer)
    contract = ensure_contract(state)
    require_can_issue(contract, caller)

    payload = _as_dict(env.payload)
    fee_due = int(contract.get("issuance_fee", 0) or 0)
    fee_paid = as_u64(payload.get("fee_paid", 0), field="fee_paid")
    if fee_paid < fee_due:
        raise InsufficientBalanceError("fee_not_paid", {"fee": fee_due, "paid": fee_paid})

    collected = int(contract.get("fees_collected", 0) or 0) + fee_paid
    if collected > U64_MAX:
        raise LedgerArithmeticError("u64_overflow", {"field": "fees_collected"})

    registry = IssuanceRegistry(state)
    issuance = Issuance.mint(
        registry.next_id(),
        description=_as_text(payload.get("description"), field="description"),
        code=_as_text(payload.get("code"), field="code"),
        original_owner=_as_text(payload.get("original_owner"), field="original_owner"),
        original_supply=payload.get("original_supply"),
        audit_time=payload.get("audit_time", 0),
        audit_remark=_as_text(payload.get("audit_remark"), field="audit_remark"),
        initial_owner=payload.get("initial_owner"),
    )
    issuance_id = registry.append(issuance)
    contract["fees_collected"] = collected

    initial_owner = as_address(payload.get("initial_owner"), field="initial_owner")
    events.emit_issuance_created(state, issuance_id)
    events.emit_transfer(state, issuance_id, NULL_ADDRESS, initial_owner, issuance.original_supply, False)

    return {"applied": LICENSE_ISSUE, "issuance_id": issuance_id}


def _apply_license_transfer(state: Json, env: TxEnvelope) -> Json:
    caller = require_caller(env.signer)
    payload = _as_dict(env.payload)
    issuance = _issuance(state, payload)
    to = as_address(payload.get("to"), field="to")
    amount = as_u64(payload.get("amount"), field="amount")

    issuance.transfer(caller, to, amount)
    events.emit_transfer(state, issuance.issuance_id, caller, to, amount, False)
    return {"applied": LICENSE_TRANSFER, "issuance_id": issuance.issuance_id, "amount": amount}


def _apply_license_transfer_reclaimable(state: Json, env: TxEnvelope) -> Json:
    caller = require_caller(env.signer)
    payload = _as_dict(env.payload)
    issuance = _issuance(state, payload)
    to = as_address(payload.get("to"), field="to")
    amount = as_u64(payload.get("amount"), field="amount")

    issuance.transfer_and_allow_reclaim(caller, to, amount)
    events.emit_transfer(state, issuance.issuance_id, caller, to, amount, True)
    return {"applied": LICENSE_TRANSFER_RECLAIMABLE, "issuance_id": issuance.issuance_id, "amount": amount}


def _apply_license_reclaim(state: Json, env: TxEnvelope) -> Json:
    caller = require_caller(env.signer)
    payload = _as_dict(env.payload)
    issuance = _issuance(state, payload)
    from_ = as_address(payload.get("from"), field="from")
    amount = as_u64(payload.get("amount"), field="amount")

    issuance.reclaim(caller, from_, amount)
    events.emit_reclaim(state, issuance.issuance_id, from_, caller, amount)
    return {"applied": LICENSE_RECLAIM, "issuance_id": issuance.issuance_id, "amount": amount}


def _apply_license_destroy(state: Json, env: TxEnvelope) -> Json:
    caller = require_caller(env.signer)
    payload = _as_dict(env.payload)
    issuance = _issuance(state, payload)
    amount = as_u64(payload.get("amount"), field="amount")

    issuance.destroy(caller, amount)
    events.emit_transfer(state, issuance.issuance_id, caller, NULL_ADDRESS, amount, False)
    return {"applied": LICENSE_DESTROY, "issuance_id": issuance.issuance_id, "amount": amount}


def _apply_license_revoke(state: Json, env: TxEnvelope) -> Json:
    caller = require_caller(env.signer)
    contract = ensure_contract(state)
    require_issuer(contract, caller)

    issuance = _issuance(state, _as_dict(env.payload))
    issuance.revoke()
    events.emit_revoke(state, issuance.issuance_id)
    return {"applied": LICENSE_REVOKE, "issuance_id": issuance.issuance_id}


_LICENSE_APPLIERS = {
    LICENSE_ISSUE: _apply_license_issue,
    LICENSE_TRANSFER: _apply_license_transfer,
    LICENSE_TRANSFER_RECLAIMABLE: _apply_license_transfer_reclaimable,
    LICENSE_RECLAIM: _apply_license_reclaim,
    LICENSE_DESTROY: _apply_license_destroy,
    LICENSE_REVOKE: _apply_license_revoke,
}


def apply_licenses(state: Json, env: TxEnvelope) -> Optional[Json]:
    """Apply LICENSE_* txs. Returns None if the tx type is not claimed here."""
    fn = _LICENSE_APPLIERS.get(env.tx_type)
    if fn is None:
        return None
    return fn(state, env)


__all__ = ["apply_licenses"]
