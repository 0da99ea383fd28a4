# src/licreg/runtime/domain_dispatch.py

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from licreg.runtime.apply.contract import apply_contract
from licreg.runtime.apply.licenses import apply_licenses
from licreg.runtime.errors import LedgerError
from licreg.runtime.state_invariants import ensure_state
from licreg.runtime.tx_admission_types import TxEnvelope

Json = Dict[str, Any]
ApplyFn = Callable[[Json, Any], Optional[Json]]


_APPLIERS: tuple[ApplyFn, ...] = (
    apply_licenses,
    apply_contract,
)


def apply_tx(state: Json, env: Any) -> Json:
    """Dispatch a TxEnvelope to the first domain applier that claims it.

    Mutates `state` in place. Use `apply_tx_atomic` when a rejected tx must
    leave no trace.
    """

    ensure_state(state)

    # Tests and tools pass raw dict envelopes. Normalize to TxEnvelope so
    # domain appliers can rely on attribute access.
    env_norm: Any = env
    if isinstance(env, dict):
        env_norm = TxEnvelope.from_json(env)

    t = str(getattr(env_norm, "tx_type", "") or "").strip().upper()
    if not t:
        raise LedgerError("invalid_tx", "missing_tx_type", {"tx_type": t})

    for fn in _APPLIERS:
        try:
            out = fn(state, env_norm)
        except LedgerError:
            raise
        except Exception as e:
            raise LedgerError(
                "domain_error",
                type(e).__name__,
                {"tx_type": t, "domain": fn.__name__, "error": str(e)},
            ) from e

        if out is not None:
            return out

    raise LedgerError("tx_unimplemented", "tx_type_not_implemented", {"tx_type": t})


__all__ = ["apply_tx"]
