# src/licreg/runtime/domain_apply.py
# ---------------------------------------------------------------------------
# Public, stable import path for applying tx envelopes.
# ---------------------------------------------------------------------------

from __future__ import annotations

import copy
from typing import Any, Dict

from licreg.runtime.domain_dispatch import apply_tx
from licreg.runtime.errors import LedgerError
from licreg.runtime.tx_admission_types import TxEnvelope

Json = Dict[str, Any]


def apply_tx_atomic(state: Json, env: Any) -> Json:
    """Apply a tx with fail-atomic semantics.

    On success:
      - state is updated as if apply_tx() ran directly.

    On LedgerError:
      - state remains unchanged, including the event log.

    A rejected tx must never leave a partially-updated balance matrix or a
    dangling audit record behind.
    """

    env_norm: Any = env
    if isinstance(env, dict):
        env_norm = TxEnvelope.from_json(env)

    # Apply on a deep copy to guarantee atomicity.
    snapshot = copy.deepcopy(state)
    meta = apply_tx(snapshot, env_norm)

    # Commit by replacing contents in-place so callers holding references
    # to `state` see the updated view.
    state.clear()
    state.update(snapshot)
    return meta


__all__ = ["LedgerError", "apply_tx", "apply_tx_atomic", "Json"]
