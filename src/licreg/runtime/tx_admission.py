# src/licreg/runtime/tx_admission.py
"""Stateless admission checks for tx envelopes.

Admission only rejects envelopes that can never apply: unknown tx types,
missing or reserved signers, non-object payloads. Everything that depends on
ledger state is decided at apply time.
"""

from __future__ import annotations

from typing import Any, Dict

from licreg.ledger.constants import NULL_ADDRESS, SUPPORTED_TX_TYPES
from licreg.runtime.tx_admission_types import TxEnvelope, TxVerdict

Json = Dict[str, Any]


def admit_tx(env: Any) -> TxVerdict:
    if isinstance(env, dict):
        payload = env.get("payload", {})
        if payload is not None and not isinstance(payload, dict):
            return TxVerdict.reject("invalid_payload", "payload_must_be_object")
        try:
            env = TxEnvelope.from_json(env)
        except (TypeError, ValueError) as e:
            return TxVerdict.reject("invalid_envelope", "malformed_envelope", {"error": str(e)})

    if not isinstance(env, TxEnvelope):
        return TxVerdict.reject("invalid_envelope", "not_an_envelope", {"type": type(env).__name__})

    if isinstance(env.nonce, bool) or not isinstance(env.nonce, int) or env.nonce < 0:
        return TxVerdict.reject("invalid_envelope", "bad_nonce", {"nonce": env.nonce})

    if env.tx_type not in SUPPORTED_TX_TYPES:
        return TxVerdict.reject("tx_unimplemented", "tx_type_not_implemented", {"tx_type": env.tx_type})

    if not env.signer:
        return TxVerdict.reject("forbidden", "missing_signer", {"tx_type": env.tx_type})

    if env.signer == NULL_ADDRESS:
        return TxVerdict.reject("forbidden", "null_signer", {"tx_type": env.tx_type})

    return TxVerdict.admit()


__all__ = ["admit_tx"]
