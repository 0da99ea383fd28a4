from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, Request

from licreg.api.routes_public_parts.common import _snapshot
from licreg.ledger.events import list_events

router = APIRouter()

Json = Dict[str, Any]


@router.get("/events")
def v1_events(
    request: Request,
    since: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    issuance_id: Optional[int] = Query(default=None, ge=0),
) -> Json:
    """Page through the audit log. `next` is the seq to pass as `since` for the following page."""
    evs = list_events(_snapshot(request), since=since, limit=limit, issuance_id=issuance_id)
    nxt = (int(evs[-1]["seq"]) + 1) if evs else since
    return {"ok": True, "events": evs, "next": nxt}
