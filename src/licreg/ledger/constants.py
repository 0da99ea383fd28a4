# src/licreg/ledger/constants.py
from __future__ import annotations

# Reserved identity for destroyed units. Never a caller, never a reclaimer.
NULL_ADDRESS = "0x0000000000000000000000000000000000000000"

U64_MAX = (1 << 64) - 1

CURRENT_STATE_VERSION = 1

# Transaction types
LICENSE_ISSUE = "LICENSE_ISSUE"
LICENSE_TRANSFER = "LICENSE_TRANSFER"
LICENSE_TRANSFER_RECLAIMABLE = "LICENSE_TRANSFER_RECLAIMABLE"
LICENSE_RECLAIM = "LICENSE_RECLAIM"
LICENSE_DESTROY = "LICENSE_DESTROY"
LICENSE_REVOKE = "LICENSE_REVOKE"

CONTRACT_SIGN = "CONTRACT_SIGN"
CONTRACT_DISABLE = "CONTRACT_DISABLE"
CONTRACT_ROOT_SET = "CONTRACT_ROOT_SET"
CONTRACT_FEE_SET = "CONTRACT_FEE_SET"
CONTRACT_FEE_WITHDRAW = "CONTRACT_FEE_WITHDRAW"

LICENSE_TX_TYPES = frozenset(
    {
        LICENSE_ISSUE,
        LICENSE_TRANSFER,
        LICENSE_TRANSFER_RECLAIMABLE,
        LICENSE_RECLAIM,
        LICENSE_DESTROY,
        LICENSE_REVOKE,
    }
)

CONTRACT_TX_TYPES = frozenset(
    {
        CONTRACT_SIGN,
        CONTRACT_DISABLE,
        CONTRACT_ROOT_SET,
        CONTRACT_FEE_SET,
        CONTRACT_FEE_WITHDRAW,
    }
)

SUPPORTED_TX_TYPES = LICENSE_TX_TYPES | CONTRACT_TX_TYPES
