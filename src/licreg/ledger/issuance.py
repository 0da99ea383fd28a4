# src/licreg/ledger/issuance.py
"""Per-issuance ownership ledger.

Each issuance record keeps a two-level balance matrix:

    balances[holder][reclaimer] -> units

A cell with holder == reclaimer is outright ownership. Any other cell is a
holding the reclaimer may recall at will. Alongside it the record keeps

    reclaimable[holder] -> sum of balances[holder][r] for r != holder

which is maintained incrementally by `_move()`, the only code path that
writes either structure after minting. Absent cells are zero; cells that
drop to zero are removed so the JSON form stays canonical.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Tuple

from licreg.ledger.constants import NULL_ADDRESS, U64_MAX
from licreg.runtime.errors import (
    AuthorizationError,
    InsufficientBalanceError,
    LedgerArithmeticError,
    StateError,
    ValidationError,
)

Json = Dict[str, Any]


def as_address(v: Any, *, field: str) -> str:
    if not isinstance(v, str) or not v.strip():
        raise ValidationError("invalid_address", {"field": field})
    return v.strip()


def as_u64(v: Any, *, field: str) -> int:
    # bool is an int subclass; disallow it explicitly
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValidationError("amount_not_int", {"field": field, "type": type(v).__name__})
    if v < 0 or v > U64_MAX:
        raise LedgerArithmeticError("u64_out_of_range", {"field": field, "value": v})
    return v


def _checked_add(a: int, b: int, *, field: str) -> int:
    c = a + b
    if c > U64_MAX:
        raise LedgerArithmeticError("u64_overflow", {"field": field, "a": a, "b": b})
    return c


def _checked_sub(a: int, b: int, *, field: str) -> int:
    if b > a:
        raise LedgerArithmeticError("u64_underflow", {"field": field, "a": a, "b": b})
    return a - b


class Issuance:
    """Mutable view over one issuance record inside the ledger state.

    The view holds a reference to the record dict; every mutation lands in
    the state it was read from. Atomicity is the caller's concern (see
    `licreg.runtime.domain_apply.apply_tx_atomic`).
    """

    def __init__(self, issuance_id: int, record: Json) -> None:
        self.issuance_id = int(issuance_id)
        self._rec = record

    @classmethod
    def mint(
        cls,
        issuance_id: int,
        *,
        description: str,
        code: str,
        original_owner: str,
        original_supply: int,
        audit_time: int,
        audit_remark: str,
        initial_owner: str,
    ) -> "Issuance":
        supply = as_u64(original_supply, field="original_supply")
        owner = as_address(initial_owner, field="initial_owner")
        if owner == NULL_ADDRESS:
            raise ValidationError("initial_owner_is_null", {"initial_owner": owner})

        rec: Json = {
            "description": str(description or ""),
            "code": str(code or ""),
            "original_owner": str(original_owner or ""),
            "original_supply": supply,
            "audit_time": as_u64(audit_time, field="audit_time"),
            "audit_remark": str(audit_remark or ""),
            "revoked": False,
            "balances": {},
            "reclaimable": {},
        }
        if supply:
            rec["balances"][owner] = {owner: supply}
        return cls(issuance_id, rec)

    @property
    def record(self) -> Json:
        return self._rec

    # ---- Immutable metadata ----

    @property
    def description(self) -> str:
        return str(self._rec.get("description", ""))

    @property
    def code(self) -> str:
        return str(self._rec.get("code", ""))

    @property
    def original_owner(self) -> str:
        return str(self._rec.get("original_owner", ""))

    @property
    def original_supply(self) -> int:
        return int(self._rec.get("original_supply", 0))

    @property
    def audit_time(self) -> int:
        return int(self._rec.get("audit_time", 0))

    @property
    def audit_remark(self) -> str:
        return str(self._rec.get("audit_remark", ""))

    @property
    def revoked(self) -> bool:
        return bool(self._rec.get("revoked", False))

    # ---- Queries ----

    def _balances(self) -> Json:
        return self._rec.setdefault("balances", {})

    def _cache(self) -> Json:
        return self._rec.setdefault("reclaimable", {})

    def cell(self, holder: str, reclaimer: str) -> int:
        row = self._balances().get(holder)
        if not isinstance(row, dict):
            return 0
        return int(row.get(reclaimer, 0))

    def balance_of(self, owner: str) -> int:
        return self.cell(owner, owner) + self.reclaimable_balance_of(owner)

    def reclaimable_balance_of(self, owner: str) -> int:
        return int(self._cache().get(owner, 0))

    def reclaimable_balance_by(self, owner: str, reclaimer: str) -> int:
        return self.cell(owner, reclaimer)

    def iter_cells(self) -> Iterator[Tuple[str, str, int]]:
        for holder, row in sorted(self._balances().items()):
            for reclaimer, amount in sorted(row.items()):
                yield holder, reclaimer, int(amount)

    def held_supply(self) -> int:
        """Units across all cells, destroyed ones included."""
        return sum(n for _, _, n in self.iter_cells())

    def circulating_supply(self) -> int:
        return sum(n for holder, _, n in self.iter_cells() if holder != NULL_ADDRESS)

    def destroyed_supply(self) -> int:
        return sum(n for holder, _, n in self.iter_cells() if holder == NULL_ADDRESS)

    # ---- Mutation primitive ----

    def _set_cell(self, holder: str, reclaimer: str, value: int) -> None:
        balances = self._balances()
        row = balances.setdefault(holder, {})
        if value:
            row[reclaimer] = value
        else:
            row.pop(reclaimer, None)
            if not row:
                balances.pop(holder, None)

    def _set_cache(self, holder: str, value: int) -> None:
        cache = self._cache()
        if value:
            cache[holder] = value
        else:
            cache.pop(holder, None)

    def _move(self, src: Tuple[str, str], dst: Tuple[str, str], amount: int) -> None:
        """Move `amount` units from cell `src` to cell `dst`.

        All new values are computed before anything is written, so a failed
        check leaves the record untouched. Units never leave a NULL cell.
        """
        amount = as_u64(amount, field="amount")
        if NULL_ADDRESS in src:
            raise AuthorizationError(
                "null_address_debit", {"holder": src[0], "reclaimer": src[1], "issuance_id": self.issuance_id}
            )

        if src == dst:
            if self.cell(*src) < amount:
                raise InsufficientBalanceError(
                    "balance_too_low",
                    {"holder": src[0], "reclaimer": src[1], "have": self.cell(*src), "need": amount},
                )
            return

        src_holder, src_reclaimer = src
        dst_holder, dst_reclaimer = dst

        have = self.cell(src_holder, src_reclaimer)
        if have < amount:
            raise InsufficientBalanceError(
                "balance_too_low",
                {"holder": src_holder, "reclaimer": src_reclaimer, "have": have, "need": amount},
            )

        new_src = have - amount
        new_dst = _checked_add(self.cell(dst_holder, dst_reclaimer), amount, field="balance")

        cache_writes: Dict[str, int] = {}
        if src_holder != src_reclaimer:
            cache_writes[src_holder] = _checked_sub(
                self.reclaimable_balance_of(src_holder), amount, field="reclaimable"
            )
        if dst_holder != dst_reclaimer:
            base = cache_writes.get(dst_holder, self.reclaimable_balance_of(dst_holder))
            cache_writes[dst_holder] = _checked_add(base, amount, field="reclaimable")

        self._set_cell(src_holder, src_reclaimer, new_src)
        self._set_cell(dst_holder, dst_reclaimer, new_dst)
        for holder, value in cache_writes.items():
            self._set_cache(holder, value)

    # ---- State transitions ----

    def _require_active(self) -> None:
        if self.revoked:
            raise StateError("issuance_revoked", {"issuance_id": self.issuance_id})

    def transfer(self, caller: str, to: str, amount: int) -> None:
        """Move outright-owned units; the recipient owns them outright."""
        self._require_active()
        caller = as_address(caller, field="caller")
        to = as_address(to, field="to")
        self._move((caller, caller), (to, to), amount)

    def transfer_and_allow_reclaim(self, caller: str, to: str, amount: int) -> None:
        """Hand units to `to` while `caller` keeps the right to recall them."""
        self._require_active()
        caller = as_address(caller, field="caller")
        to = as_address(to, field="to")
        if to == NULL_ADDRESS:
            raise ValidationError("null_cannot_hold_reclaimable", {"issuance_id": self.issuance_id})
        self._move((caller, caller), (to, caller), amount)

    def reclaim(self, caller: str, from_: str, amount: int) -> None:
        self._require_active()
        caller = as_address(caller, field="caller")
        from_ = as_address(from_, field="from")
        self._move((from_, caller), (caller, caller), amount)

    def destroy(self, caller: str, amount: int) -> None:
        self.transfer(caller, NULL_ADDRESS, amount)

    def revoke(self) -> None:
        if self.revoked:
            raise StateError("issuance_already_revoked", {"issuance_id": self.issuance_id})
        self._rec["revoked"] = True

    # ---- Serialization ----

    def summary(self) -> Json:
        return {
            "issuance_id": self.issuance_id,
            "description": self.description,
            "code": self.code,
            "original_owner": self.original_owner,
            "original_supply": self.original_supply,
            "audit_time": self.audit_time,
            "audit_remark": self.audit_remark,
            "revoked": self.revoked,
            "circulating_supply": self.circulating_supply(),
        }


__all__ = ["Issuance", "as_address", "as_u64"]
