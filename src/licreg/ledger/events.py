# src/licreg/ledger/events.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

Json = Dict[str, Any]

ISSUANCE_CREATED = "IssuanceCreated"
TRANSFER = "Transfer"
RECLAIM = "Reclaim"
REVOKE = "Revoke"

SIGNED = "Signed"
DISABLED = "Disabled"
ROOT_CHANGED = "RootChanged"
FEE_SET = "FeeSet"
FEES_WITHDRAWN = "FeesWithdrawn"


def _ensure_events(state: Json) -> List[Json]:
    events = state.get("events")
    if not isinstance(events, list):
        events = []
        state["events"] = events
    return events


def emit(state: Json, event: str, **fields: Any) -> Json:
    """Append one record to the audit log and return it.

    Records are never edited after they are appended. `seq` is the record's
    position in the log.
    """
    events = _ensure_events(state)
    rec: Json = {"seq": len(events), "event": str(event)}
    rec.update(fields)
    events.append(rec)
    return rec


def emit_issuance_created(state: Json, issuance_id: int) -> Json:
    return emit(state, ISSUANCE_CREATED, issuance_id=int(issuance_id))


def emit_transfer(state: Json, issuance_id: int, from_: str, to: str, amount: int, reclaimable: bool) -> Json:
    return emit(
        state,
        TRANSFER,
        issuance_id=int(issuance_id),
        **{"from": from_},
        to=to,
        amount=int(amount),
        reclaimable=bool(reclaimable),
    )


def emit_reclaim(state: Json, issuance_id: int, from_: str, to: str, amount: int) -> Json:
    return emit(state, RECLAIM, issuance_id=int(issuance_id), **{"from": from_}, to=to, amount=int(amount))


def emit_revoke(state: Json, issuance_id: int) -> Json:
    return emit(state, REVOKE, issuance_id=int(issuance_id))


def list_events(
    state: Json,
    *,
    since: int = 0,
    limit: int = 100,
    issuance_id: Optional[int] = None,
) -> List[Json]:
    events = state.get("events")
    if not isinstance(events, list):
        return []
    out: List[Json] = []
    for ev in events[max(0, int(since)):]:
        if issuance_id is not None and ev.get("issuance_id") != issuance_id:
            continue
        out.append(dict(ev))
        if len(out) >= int(limit):
            break
    return out


__all__ = [
    "ISSUANCE_CREATED",
    "TRANSFER",
    "RECLAIM",
    "REVOKE",
    "SIGNED",
    "DISABLED",
    "ROOT_CHANGED",
    "FEE_SET",
    "FEES_WITHDRAWN",
    "emit",
    "emit_issuance_created",
    "emit_transfer",
    "emit_reclaim",
    "emit_revoke",
    "list_events",
]
