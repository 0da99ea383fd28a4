"""licreg.ledger.types

LicenseState object model + strict schema validation.

The ledger state is a JSON-shaped dict with three roots:
  - contract:  issuer/root identities, lifecycle flags, fee book
  - issuances: append-only list of issuance records (index == issuance id)
  - events:    append-only audit log
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, MutableMapping

from licreg.ledger.constants import CURRENT_STATE_VERSION, U64_MAX

Json = Dict[str, Any]


def _coerce_u64(v: Any, *, field: str) -> int:
    # bool is an int subclass; disallow it explicitly
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValueError(f"LicenseState schema error: field '{field}' must be int (got {type(v).__name__})")
    if v < 0 or v > U64_MAX:
        raise ValueError(f"LicenseState schema error: field '{field}' out of u64 range ({v})")
    return v


def _require_dict(v: Any, *, field: str) -> Json:
    if not isinstance(v, dict):
        raise ValueError(f"LicenseState schema error: field '{field}' must be dict (got {type(v).__name__})")
    return v


def _require_list(v: Any, *, field: str) -> List[Any]:
    if not isinstance(v, list):
        raise ValueError(f"LicenseState schema error: field '{field}' must be list (got {type(v).__name__})")
    return v


def _require_bool(v: Any, *, field: str) -> bool:
    if not isinstance(v, bool):
        raise ValueError(f"LicenseState schema error: field '{field}' must be bool (got {type(v).__name__})")
    return v


@dataclass
class LicenseState(MutableMapping[str, Any]):
    """Mutable license ledger state with a stable, JSON-backed schema."""
    _data: Json = field(default_factory=dict)

    # ---- Mapping protocol ----

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str, default: Any = None) -> Any:  # type: ignore[override]
        return self._data.get(key, default)

    # ---- JSON interop ----

    def to_dict(self) -> Json:
        return dict(self._data)

    @classmethod
    def from_dict(cls, d: Any) -> "LicenseState":
        return cls(_data=d if isinstance(d, dict) else {})

    # ---- Strict validation ----

    def validate(self) -> None:
        """Validate the full schema plus the ledger invariants.

        Raises ValueError on the first violation. Used when loading a
        snapshot handed over by the host before any tx is applied to it.
        """
        v = self._data.get("state_version")
        if v != CURRENT_STATE_VERSION:
            raise ValueError(
                f"LicenseState schema error: state_version={v!r} != CURRENT_STATE_VERSION={CURRENT_STATE_VERSION}"
            )

        contract = _require_dict(self._data.get("contract"), field="contract")
        for k in ("issuer", "root"):
            if not isinstance(contract.get(k), str) or not contract.get(k):
                raise ValueError(f"LicenseState schema error: contract.{k} must be a non-empty string")
        _require_bool(contract.get("signed"), field="contract.signed")
        _require_bool(contract.get("disabled"), field="contract.disabled")
        _coerce_u64(contract.get("issuance_fee"), field="contract.issuance_fee")
        _coerce_u64(contract.get("fees_collected"), field="contract.fees_collected")

        issuances = _require_list(self._data.get("issuances"), field="issuances")
        for idx, rec_raw in enumerate(issuances):
            rec = _require_dict(rec_raw, field=f"issuances[{idx}]")
            supply = _coerce_u64(rec.get("original_supply"), field=f"issuances[{idx}].original_supply")
            _require_bool(rec.get("revoked"), field=f"issuances[{idx}].revoked")
            balances = _require_dict(rec.get("balances"), field=f"issuances[{idx}].balances")
            cache = _require_dict(rec.get("reclaimable"), field=f"issuances[{idx}].reclaimable")

            total = 0
            for owner, row_raw in balances.items():
                row = _require_dict(row_raw, field=f"issuances[{idx}].balances[{owner!r}]")
                delegated = 0
                for reclaimer, amount in row.items():
                    n = _coerce_u64(amount, field=f"issuances[{idx}].balances[{owner!r}][{reclaimer!r}]")
                    total += n
                    if reclaimer != owner:
                        delegated += n
                cached = _coerce_u64(cache.get(owner, 0), field=f"issuances[{idx}].reclaimable[{owner!r}]")
                if cached != delegated:
                    raise ValueError(
                        f"LicenseState invariant error: issuances[{idx}] reclaimable cache for {owner!r} "
                        f"is {cached}, matrix says {delegated}"
                    )
            for owner in cache:
                if owner not in balances and cache[owner]:
                    raise ValueError(
                        f"LicenseState invariant error: issuances[{idx}] reclaimable cache for {owner!r} has no holdings"
                    )
            if total != supply:
                raise ValueError(
                    f"LicenseState invariant error: issuances[{idx}] holds {total} units, original supply is {supply}"
                )

        events = _require_list(self._data.get("events"), field="events")
        for pos, ev in enumerate(events):
            ev = _require_dict(ev, field=f"events[{pos}]")
            if ev.get("seq") != pos:
                raise ValueError(f"LicenseState schema error: events[{pos}].seq must equal its position")


__all__ = ["LicenseState", "Json"]
