from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class LedgerError(Exception):
    """Canonical error type for ledger apply and dispatch failures."""

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class AuthorizationError(LedgerError):
    """Caller lacks the role the operation requires."""

    def __init__(self, reason: str, details: Any | None = None) -> None:
        super().__init__("forbidden", reason, details)


class StateError(LedgerError):
    """Operation is not valid in the current lifecycle state."""

    def __init__(self, reason: str, details: Any | None = None) -> None:
        super().__init__("invalid_state", reason, details)


class InsufficientBalanceError(LedgerError):
    def __init__(self, reason: str, details: Any | None = None) -> None:
        super().__init__("insufficient_balance", reason, details)


class LedgerArithmeticError(LedgerError, ArithmeticError):
    """A count would leave the unsigned 64-bit range."""

    def __init__(self, reason: str, details: Any | None = None) -> None:
        super().__init__("arithmetic", reason, details)


class ValidationError(LedgerError):
    def __init__(self, reason: str, details: Any | None = None) -> None:
        super().__init__("invalid_payload", reason, details)


class NotFoundError(LedgerError):
    def __init__(self, reason: str, details: Any | None = None) -> None:
        super().__init__("not_found", reason, details)


__all__ = [
    "LedgerError",
    "AuthorizationError",
    "StateError",
    "InsufficientBalanceError",
    "LedgerArithmeticError",
    "ValidationError",
    "NotFoundError",
]
