# src/licreg/runtime/gates.py
"""Issuer authority gate.

Role and lifecycle checks shared by the appliers. Every check takes the
caller identity explicitly and raises a typed LedgerError on failure.
"""

from __future__ import annotations

from typing import Any, Dict

from licreg.ledger.constants import NULL_ADDRESS
from licreg.runtime.errors import AuthorizationError, StateError

Json = Dict[str, Any]


def _as_str(v: Any) -> str:
    return str(v).strip() if v is not None else ""


def require_caller(caller: str) -> str:
    c = _as_str(caller)
    if not c:
        raise AuthorizationError("missing_caller")
    if c == NULL_ADDRESS:
        raise AuthorizationError("null_caller")
    return c


def is_issuer(contract: Json, caller: str) -> bool:
    return _as_str(contract.get("issuer")) == caller


def is_root(contract: Json, caller: str) -> bool:
    return _as_str(contract.get("root")) == caller


def require_issuer(contract: Json, caller: str) -> None:
    if not is_issuer(contract, caller):
        raise AuthorizationError("issuer_required", {"caller": caller})


def require_root(contract: Json, caller: str) -> None:
    if not is_root(contract, caller):
        raise AuthorizationError("root_required", {"caller": caller})


def require_issuer_or_root(contract: Json, caller: str) -> None:
    if not (is_issuer(contract, caller) or is_root(contract, caller)):
        raise AuthorizationError("issuer_or_root_required", {"caller": caller})


def require_can_issue(contract: Json, caller: str) -> None:
    """Issuance creation: issuer only, on a signed, enabled contract."""
    require_issuer(contract, caller)
    if not bool(contract.get("signed", False)):
        raise StateError("contract_not_signed")
    if bool(contract.get("disabled", False)):
        raise StateError("contract_disabled")


def require_not_signed(contract: Json) -> None:
    if bool(contract.get("signed", False)):
        raise StateError("contract_already_signed")


def require_not_disabled(contract: Json) -> None:
    if bool(contract.get("disabled", False)):
        raise StateError("contract_disabled")


__all__ = [
    "require_caller",
    "is_issuer",
    "is_root",
    "require_issuer",
    "require_root",
    "require_issuer_or_root",
    "require_can_issue",
    "require_not_signed",
    "require_not_disabled",
]
