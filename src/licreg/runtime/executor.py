from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Dict, Optional

from licreg.ledger.registry import new_contract_state
from licreg.ledger.types import LicenseState
from licreg.runtime.contract_config import ContractConfig, load_contract_config
from licreg.runtime.domain_apply import apply_tx_atomic
from licreg.runtime.errors import LedgerError
from licreg.runtime.runtime_logging import log_event
from licreg.runtime.tx_admission import admit_tx
from licreg.runtime.tx_admission_types import TxEnvelope, envelope_log_fields

Json = Dict[str, Any]


class ExecutorError(RuntimeError):
    pass


class LicenseExecutor:
    """Serialized, fail-atomic executor for one license contract.

    Txs are applied one at a time under a lock; each either commits fully
    (state + audit records) or leaves the state untouched. Durable storage of
    `read_state()` snapshots belongs to the host.
    """

    def __init__(self, *, cfg: ContractConfig, state: Optional[Json] = None) -> None:
        self.cfg = cfg
        self._lock = threading.Lock()
        self._log = logging.getLogger("licreg.executor")

        if state is None:
            self.state = self._initial_state()
        else:
            try:
                LicenseState.from_dict(state).validate()
            except ValueError as e:
                raise ExecutorError(f"refusing to load invalid state: {e}") from e
            self.state = copy.deepcopy(state)

    def _initial_state(self) -> Json:
        c = self.cfg
        return new_contract_state(
            issuer=c.issuer,
            root=c.root,
            contract_id=c.contract_id,
            issuer_name=c.issuer_name,
            liability=c.liability,
            safekeeping_period=c.safekeeping_period,
            issuer_certificate=c.issuer_certificate,
            issuance_fee=c.issuance_fee,
        )

    @property
    def contract_id(self) -> str:
        return self.cfg.contract_id

    def read_state(self) -> Json:
        """Deep copy of the committed state; safe to hand to readers."""
        with self._lock:
            return copy.deepcopy(self.state)

    # ----------------------------
    # Tx submission
    # ----------------------------

    def _log_tx(self, event: str, fields: Json, **extra: Any) -> None:
        log_event(self._log, event, contract_id=self.contract_id, **fields, **extra)

    def apply(self, env: Any) -> Json:
        """Admit and apply one tx. Raises LedgerError on rejection.

        Every tx leaves exactly one log line: `tx_applied`, or `tx_rejected`
        with the stage (admission or apply) that refused it.
        """
        verdict = admit_tx(env)
        if not verdict.ok:
            self._log_tx(
                "tx_rejected",
                envelope_log_fields(env),
                stage="admission",
                code=verdict.code,
                reason=verdict.reason,
            )
            raise LedgerError(verdict.code, verdict.reason, verdict.details)

        env_norm = TxEnvelope.from_json(env)
        with self._lock:
            try:
                meta = apply_tx_atomic(self.state, env_norm)
            except LedgerError as e:
                self._log_tx("tx_rejected", env_norm.log_fields(), stage="apply", code=e.code, reason=e.reason)
                raise
            events = self.state.get("events") or []

        self._log_tx("tx_applied", env_norm.log_fields(), event_seq=len(events) - 1, meta=meta)
        return meta

    # ----------------------------
    # Orchestration hooks
    # ----------------------------

    @classmethod
    def from_env(cls) -> "LicenseExecutor":
        return cls(cfg=load_contract_config())


def build_executor(cfg: Optional[ContractConfig] = None) -> LicenseExecutor:
    """Build an executor from an explicit config or, if omitted, from the environment."""
    if cfg is None:
        return LicenseExecutor.from_env()
    return LicenseExecutor(cfg=cfg)


__all__ = ["ExecutorError", "LicenseExecutor", "build_executor"]
