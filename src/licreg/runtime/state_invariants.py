# src/licreg/runtime/state_invariants.py
from __future__ import annotations

"""State invariants / normalization helpers.

License state is a nested JSON-like dict mutated deterministically by the
apply_* modules. This module is the single place that checks the state is
dict-like and that the core containers exist before an applier runs.
"""

from collections.abc import MutableMapping
from typing import Any, Dict

Json = Dict[str, Any]


def ensure_state(st: Any) -> Json:
    """Ensure `st` is a dict and contains core keys.

    Returns the (possibly mutated) dict.

    Raises:
        TypeError: if st is not a MutableMapping
    """
    if not isinstance(st, MutableMapping):
        raise TypeError(f"state must be MutableMapping, got {type(st)}")

    for key in ("issuances", "events"):
        v = st.get(key)
        if v is None:
            st[key] = []
        elif not isinstance(v, list):
            # Fail closed: do not attempt to coerce arbitrary types.
            raise TypeError(f"state['{key}'] must be list, got {type(v)}")

    c = st.get("contract")
    if c is not None and not isinstance(c, dict):
        raise TypeError(f"state['contract'] must be dict, got {type(c)}")

    return st  # type: ignore[return-value]


__all__ = ["ensure_state"]
