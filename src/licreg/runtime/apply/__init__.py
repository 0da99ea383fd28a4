# src/licreg/runtime/apply/__init__.py
"""Domain-specific apply modules.

Each module claims a subset of tx types and mutates the ledger state in
place. Dispatch order lives in licreg.runtime.domain_dispatch.
"""

from __future__ import annotations

__all__ = [
    "licenses",
    "contract",
]
