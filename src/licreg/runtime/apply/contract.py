# src/licreg/runtime/apply/contract.py
from __future__ import annotations

from typing import Any, Dict, Optional

from licreg.ledger import events
from licreg.ledger.constants import (
    CONTRACT_DISABLE,
    CONTRACT_FEE_SET,
    CONTRACT_FEE_WITHDRAW,
    CONTRACT_ROOT_SET,
    CONTRACT_SIGN,
    NULL_ADDRESS,
)
from licreg.ledger.issuance import as_address, as_u64
from licreg.ledger.registry import ensure_contract
from licreg.runtime.errors import InsufficientBalanceError, ValidationError
from licreg.runtime.gates import (
    require_caller,
    require_issuer,
    require_issuer_or_root,
    require_not_disabled,
    require_not_signed,
    require_root,
)
from licreg.runtime.tx_admission_types import TxEnvelope

Json = Dict[str, Any]


def _as_dict(v: Any) -> Json:
    return v if isinstance(v, dict) else {}


def _apply_contract_sign(state: Json, env: TxEnvelope) -> Json:
    """
    The issuer signs the certificate text once. The signature itself is an
    opaque string; verifying it against the issuer certificate is the host's job.
    """
    caller = require_caller(env.signer)
    contract = ensure_contract(state)
    require_issuer(contract, caller)
    require_not_signed(contract)

    signature = _as_dict(env.payload).get("signature")
    if not isinstance(signature, str) or not signature.strip():
        raise ValidationError("missing_signature", {})

    contract["signature"] = signature.strip()
    contract["signed"] = True
    events.emit(state, events.SIGNED, signer=caller)
    return {"applied": CONTRACT_SIGN}


def _apply_contract_disable(state: Json, env: TxEnvelope) -> Json:
    caller = require_caller(env.signer)
    contract = ensure_contract(state)
    require_issuer_or_root(contract, caller)
    require_not_disabled(contract)

    contract["disabled"] = True
    events.emit(state, events.DISABLED, by=caller)
    return {"applied": CONTRACT_DISABLE}


def _apply_contract_root_set(state: Json, env: TxEnvelope) -> Json:
    caller = require_caller(env.signer)
    contract = ensure_contract(state)
    require_root(contract, caller)

    new_root = as_address(_as_dict(env.payload).get("new_root"), field="new_root")
    if new_root == NULL_ADDRESS:
        raise ValidationError("null_root", {})

    contract["root"] = new_root
    events.emit(state, events.ROOT_CHANGED, old_root=caller, new_root=new_root)
    return {"applied": CONTRACT_ROOT_SET, "root": new_root}


def _apply_contract_fee_set(state: Json, env: TxEnvelope) -> Json:
    caller = require_caller(env.signer)
    contract = ensure_contract(state)
    require_root(contract, caller)

    fee = as_u64(_as_dict(env.payload).get("fee"), field="fee")
    contract["issuance_fee"] = fee
    events.emit(state, events.FEE_SET, fee=fee)
    return {"applied": CONTRACT_FEE_SET, "fee": fee}


def _apply_contract_fee_withdraw(state: Json, env: TxEnvelope) -> Json:
    caller = require_caller(env.signer)
    contract = ensure_contract(state)
    require_root(contract, caller)

    payload = _as_dict(env.payload)
    amount = as_u64(payload.get("amount"), field="amount")
    recipient = as_address(payload.get("recipient") or caller, field="recipient")
    if recipient == NULL_ADDRESS:
        raise ValidationError("null_recipient", {})

    collected = int(contract.get("fees_collected", 0) or 0)
    if amount > collected:
        raise InsufficientBalanceError("fees_too_low", {"have": collected, "need": amount})

    contract["fees_collected"] = collected - amount
    events.emit(state, events.FEES_WITHDRAWN, recipient=recipient, amount=amount)
    return {"applied": CONTRACT_FEE_WITHDRAW, "amount": amount, "recipient": recipient}


_CONTRACT_APPLIERS = {
    CONTRACT_SIGN: _apply_contract_sign,
    CONTRACT_DISABLE: _apply_contract_disable,
    CONTRACT_ROOT_SET: _apply_contract_root_set,
    CONTRACT_FEE_SET: _apply_contract_fee_set,
    CONTRACT_FEE_WITHDRAW: _apply_contract_fee_withdraw,
}


def apply_contract(state: Json, env: TxEnvelope) -> Optional[Json]:
    """Apply CONTRACT_* txs. Returns None if the tx type is not claimed here."""
    fn = _CONTRACT_APPLIERS.get(env.tx_type)
    if fn is None:
        return None
    return fn(state, env)


__all__ = ["apply_contract"]
