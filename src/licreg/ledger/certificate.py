# src/licreg/ledger/certificate.py
from __future__ import annotations

from typing import Any, Dict

Json = Dict[str, Any]


def certificate_text(contract: Json) -> str:
    """Render the statement the issuer signs when activating a contract.

    The text binds the issuer to the contract's liability terms and fee. It is
    derived from immutable contract fields plus the current fee, so it is
    stable for as long as the fee is unchanged.
    """
    issuer_name = str(contract.get("issuer_name") or "")
    issuer = str(contract.get("issuer") or "")
    contract_id = str(contract.get("contract_id") or "")
    liability = str(contract.get("liability") or "")
    years = int(contract.get("safekeeping_period") or 0)
    fee = int(contract.get("issuance_fee") or 0)

    unit = "year" if years == 1 else "years"
    return (
        f"Licenses in contract {contract_id} are issued by {issuer_name} ({issuer}). "
        f"{issuer_name} guarantees that every issuance is backed by an audit and that the "
        f"audit records are kept for {years} {unit}. "
        f"Liability: {liability} "
        f"Each issuance carries a fee of {fee}."
    )


__all__ = ["certificate_text"]
