from __future__ import annotations

"""Pydantic request schemas for the public API.

These exist only for HTTP input validation. Ledger-level validation
(u64 ranges, null address rules, roles) still happens at apply time.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class TxSubmitRequest(BaseModel):
    tx_type: str = Field(..., min_length=1, description="e.g. LICENSE_TRANSFER")
    signer: str = Field(..., min_length=1, description="Caller identity asserted by the host")
    nonce: int = Field(default=0, ge=0)
    payload: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}
