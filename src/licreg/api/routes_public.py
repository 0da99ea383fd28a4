# src/licreg/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from licreg.api.routes_public_parts.contract import router as contract_router
from licreg.api.routes_public_parts.events import router as events_router
from licreg.api.routes_public_parts.issuances import router as issuances_router
from licreg.api.routes_public_parts.tx import router as tx_router

public_router = APIRouter()

# Versioned API surface
public_router.include_router(contract_router, prefix="/v1", tags=["contract"])
public_router.include_router(issuances_router, prefix="/v1", tags=["issuances"])
public_router.include_router(events_router, prefix="/v1", tags=["events"])
public_router.include_router(tx_router, prefix="/v1", tags=["tx"])
