# src/licreg/runtime/tx_admission_types.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

Json = Dict[str, Any]


@dataclass(frozen=True)
class TxVerdict:
    """Admission outcome. Unpacks as `(ok, rejection)`; rejection is None when admitted."""

    ok: bool
    code: str
    reason: str
    details: Optional[Json] = None

    def __iter__(self) -> Iterator[Any]:
        yield self.ok
        yield None if self.ok else self

    @staticmethod
    def admit() -> "TxVerdict":
        return TxVerdict(True, "ok", "admitted", None)

    @staticmethod
    def reject(code: str, reason: str, details: Optional[Json] = None) -> "TxVerdict":
        return TxVerdict(False, code, reason, details)


def _issuance_ref(payload: Any) -> Optional[int]:
    if not isinstance(payload, dict):
        return None
    v = payload.get("issuance_id")
    if isinstance(v, bool) or not isinstance(v, int):
        return None
    return v


@dataclass(frozen=True)
class TxEnvelope:
    """A state-changing request against one license contract.

    `signer` is the caller identity supplied by the host. `nonce` is the
    host's sequence number for the signer; it is carried into the tx logs
    so a host can correlate its submissions with ledger outcomes.
    """

    tx_type: str
    signer: str
    nonce: int
    payload: Json

    @staticmethod
    def from_json(j: Any) -> "TxEnvelope":
        if isinstance(j, TxEnvelope):
            return j
        if not isinstance(j, dict):
            j = dict(j)  # type: ignore[arg-type]
        nonce = int(j.get("nonce", 0) or 0)
        if nonce < 0:
            raise ValueError(f"nonce must be >= 0; got: {nonce}")
        return TxEnvelope(
            tx_type=str(j.get("tx_type", "")).strip().upper(),
            signer=str(j.get("signer", "")).strip(),
            nonce=nonce,
            payload=dict(j.get("payload", {}) or {}),
        )

    @property
    def issuance_id(self) -> Optional[int]:
        """Issuance the tx targets, if its payload names one."""
        return _issuance_ref(self.payload)

    def log_fields(self) -> Json:
        return {
            "tx_type": self.tx_type,
            "signer": self.signer,
            "nonce": self.nonce,
            "issuance_id": self.issuance_id,
        }


def envelope_log_fields(env: Any) -> Json:
    """Best-effort log fields for an envelope that may not have passed admission."""
    if isinstance(env, TxEnvelope):
        return env.log_fields()
    if not isinstance(env, dict):
        return {"tx_type": None, "signer": None, "nonce": None, "issuance_id": None}
    return {
        "tx_type": str(env.get("tx_type", "") or "").strip().upper() or None,
        "signer": str(env.get("signer", "") or "").strip() or None,
        "nonce": env.get("nonce") if isinstance(env.get("nonce"), int) else None,
        "issuance_id": _issuance_ref(env.get("payload")),
    }


__all__ = ["TxEnvelope", "TxVerdict", "envelope_log_fields"]
