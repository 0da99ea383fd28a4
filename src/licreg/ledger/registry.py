# src/licreg/ledger/registry.py
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from licreg.ledger.constants import CURRENT_STATE_VERSION, NULL_ADDRESS, U64_MAX
from licreg.ledger.issuance import Issuance
from licreg.runtime.errors import NotFoundError, ValidationError

Json = Dict[str, Any]


def new_contract_state(
    *,
    issuer: str,
    root: str,
    contract_id: str = "",
    issuer_name: str = "",
    liability: str = "",
    safekeeping_period: int = 0,
    issuer_certificate: str = "",
    issuance_fee: int = 0,
) -> Json:
    """Build the initial ledger state for one license contract.

    The issuer identity is fixed here for the life of the contract.
    """
    issuer_s = str(issuer or "").strip()
    root_s = str(root or "").strip()
    for name, v in (("issuer", issuer_s), ("root", root_s)):
        if not v or v == NULL_ADDRESS:
            raise ValidationError("invalid_authority", {"field": name, "value": v})
    if isinstance(issuance_fee, bool) or not isinstance(issuance_fee, int) or not 0 <= issuance_fee <= U64_MAX:
        raise ValidationError("invalid_fee", {"issuance_fee": issuance_fee})

    return {
        "state_version": CURRENT_STATE_VERSION,
        "contract": {
            "contract_id": str(contract_id or ""),
            "issuer": issuer_s,
            "root": root_s,
            "issuer_name": str(issuer_name or ""),
            "liability": str(liability or ""),
            "safekeeping_period": int(safekeeping_period),
            "issuer_certificate": str(issuer_certificate or ""),
            "signature": "",
            "signed": False,
            "disabled": False,
            "issuance_fee": int(issuance_fee),
            "fees_collected": 0,
        },
        "issuances": [],
        "events": [],
    }


def ensure_contract(state: Json) -> Json:
    c = state.get("contract")
    if not isinstance(c, dict):
        raise NotFoundError("contract_not_initialized", {})
    return c


class IssuanceRegistry:
    """Append-only sequence of issuances, indexed by position."""

    def __init__(self, state: Json) -> None:
        items = state.get("issuances")
        if not isinstance(items, list):
            items = []
            state["issuances"] = items
        self._items: List[Json] = items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Issuance]:
        for i, rec in enumerate(self._items):
            yield Issuance(i, rec)

    def append(self, issuance: Issuance) -> int:
        issuance_id = len(self._items)
        if issuance.issuance_id != issuance_id:
            raise ValidationError(
                "issuance_id_mismatch", {"expected": issuance_id, "got": issuance.issuance_id}
            )
        self._items.append(issuance.record)
        return issuance_id

    def next_id(self) -> int:
        return len(self._items)

    def get(self, issuance_id: Any) -> Issuance:
        if isinstance(issuance_id, bool) or not isinstance(issuance_id, int):
            raise ValidationError("invalid_issuance_id", {"issuance_id": issuance_id})
        if issuance_id < 0 or issuance_id >= len(self._items):
            raise NotFoundError("unknown_issuance", {"issuance_id": issuance_id})
        return Issuance(issuance_id, self._items[issuance_id])


# ---- Read-only queries (callable by anyone on a state snapshot) ----


def _issuance(state: Json, issuance_id: int) -> Issuance:
    return IssuanceRegistry(state).get(issuance_id)


def issuance_count(state: Json) -> int:
    items = state.get("issuances")
    return len(items) if isinstance(items, list) else 0


def balance_of(state: Json, issuance_id: int, owner: str) -> int:
    return _issuance(state, issuance_id).balance_of(owner)


def reclaimable_balance_of(state: Json, issuance_id: int, owner: str, reclaimer: Optional[str] = None) -> int:
    iss = _issuance(state, issuance_id)
    if reclaimer is None:
        return iss.reclaimable_balance_of(owner)
    return iss.reclaimable_balance_by(owner, reclaimer)


def is_revoked(state: Json, issuance_id: int) -> bool:
    return _issuance(state, issuance_id).revoked


def circulating_supply(state: Json, issuance_id: int) -> int:
    return _issuance(state, issuance_id).circulating_supply()


def issuance_metadata(state: Json, issuance_id: int) -> Json:
    return _issuance(state, issuance_id).summary()


__all__ = [
    "IssuanceRegistry",
    "new_contract_state",
    "ensure_contract",
    "issuance_count",
    "balance_of",
    "reclaimable_balance_of",
    "is_revoked",
    "circulating_supply",
    "issuance_metadata",
]
