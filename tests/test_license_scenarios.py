# tests/test_license_scenarios.py
from __future__ import annotations

from typing import Any, Dict

import pytest

from licreg.ledger.constants import NULL_ADDRESS
from licreg.ledger.registry import (
    balance_of,
    circulating_supply,
    is_revoked,
    issuance_count,
    issuance_metadata,
    new_contract_state,
    reclaimable_balance_of,
)
from licreg.runtime.domain_apply import apply_tx, apply_tx_atomic
from licreg.runtime.errors import (
    AuthorizationError,
    InsufficientBalanceError,
    LedgerError,
    NotFoundError,
    StateError,
    ValidationError,
)
from licreg.runtime.tx_admission_types import TxEnvelope

Json = Dict[str, Any]

ISSUER = "issuer"
ROOT = "root"
A, B, C, D = "alice", "bob", "carol", "dave"


def _env(tx_type: str, payload: Json, signer: str = A, nonce: int = 1) -> TxEnvelope:
    return TxEnvelope(tx_type=tx_type, signer=signer, nonce=nonce, payload=payload)


def _signed_state() -> Json:
    st = new_contract_state(issuer=ISSUER, root=ROOT, contract_id="c1", issuer_name="Example Licensing")
    apply_tx(st, _env("CONTRACT_SIGN", {"signature": "sig-over-certificate"}, signer=ISSUER))
    return st


def _issue(st: Json, supply: int = 100, owner: str = A) -> int:
    meta = apply_tx(
        st,
        _env(
            "LICENSE_ISSUE",
            {
                "description": "Office suite",
                "code": "OS-2024",
                "original_owner": "Alice GmbH",
                "original_supply": supply,
                "audit_remark": "checked invoices",
                "audit_time": 1_700_000_000,
                "initial_owner": owner,
            },
            signer=ISSUER,
        ),
    )
    assert meta["applied"] == "LICENSE_ISSUE"
    return meta["issuance_id"]


def test_issue_returns_sequential_ids_and_emits_mint_records() -> None:
    st = _signed_state()
    first = _issue(st)
    second = _issue(st, supply=5, owner=B)

    assert (first, second) == (0, 1)
    assert issuance_count(st) == 2
    assert balance_of(st, 1, B) == 5

    created = [e for e in st["events"] if e["event"] == "IssuanceCreated"]
    assert [e["issuance_id"] for e in created] == [0, 1]

    mint = st["events"][2]
    assert mint == {
        "seq": 2,
        "event": "Transfer",
        "issuance_id": 0,
        "from": NULL_ADDRESS,
        "to": A,
        "amount": 100,
        "reclaimable": False,
    }


def test_metadata_is_readable_by_anyone() -> None:
    st = _signed_state()
    iid = _issue(st)
    meta = issuance_metadata(st, iid)
    assert meta["description"] == "Office suite"
    assert meta["code"] == "OS-2024"
    assert meta["original_owner"] == "Alice GmbH"
    assert meta["original_supply"] == 100
    assert meta["audit_time"] == 1_700_000_000
    assert meta["audit_remark"] == "checked invoices"
    assert meta["revoked"] is False


def test_transfer_delegate_reclaim_revoke_walkthrough() -> None:
    st = _signed_state()
    iid = _issue(st)

    apply_tx(st, _env("LICENSE_TRANSFER", {"issuance_id": iid, "to": B, "amount": 30}))
    assert balance_of(st, iid, A) == 70
    assert balance_of(st, iid, B) == 30

    apply_tx(st, _env("LICENSE_TRANSFER_RECLAIMABLE", {"issuance_id": iid, "to": C, "amount": 20}))
    assert balance_of(st, iid, A) == 50
    assert balance_of(st, iid, C) == 20
    assert reclaimable_balance_of(st, iid, C) == 20
    assert reclaimable_balance_of(st, iid, C, A) == 20

    apply_tx(st, _env("LICENSE_RECLAIM", {"issuance_id": iid, "from": C, "amount": 20}))
    assert balance_of(st, iid, A) == 70
    assert balance_of(st, iid, C) == 0

    apply_tx(st, _env("LICENSE_REVOKE", {"issuance_id": iid}, signer=ISSUER))
    assert is_revoked(st, iid) is True

    with pytest.raises(StateError):
        apply_tx(st, _env("LICENSE_TRANSFER", {"issuance_id": iid, "to": D, "amount": 10}, signer=B))

    assert [e["event"] for e in st["events"]] == [
        "Signed",
        "IssuanceCreated",
        "Transfer",
        "Transfer",
        "Transfer",
        "Reclaim",
        "Revoke",
    ]
    delegate = st["events"][4]
    assert delegate["reclaimable"] is True
    assert (delegate["from"], delegate["to"], delegate["amount"]) == (A, C, 20)
    reclaim = st["events"][5]
    assert (reclaim["from"], reclaim["to"], reclaim["amount"]) == (C, A, 20)


def test_destroy_reduces_circulating_supply_only() -> None:
    st = _signed_state()
    iid = _issue(st)
    apply_tx(st, _env("LICENSE_TRANSFER", {"issuance_id": iid, "to": B, "amount": 30}))

    meta = apply_tx(st, _env("LICENSE_DESTROY", {"issuance_id": iid, "amount": 70}))
    assert meta == {"applied": "LICENSE_DESTROY", "issuance_id": iid, "amount": 70}

    assert balance_of(st, iid, A) == 0
    assert circulating_supply(st, iid) == 30
    assert issuance_metadata(st, iid)["original_supply"] == 100

    last = st["events"][-1]
    assert (last["event"], last["to"], last["amount"], last["reclaimable"]) == ("Transfer", NULL_ADDRESS, 70, False)


def test_transfer_to_null_is_destruction() -> None:
    st = _signed_state()
    iid = _issue(st)
    apply_tx(st, _env("LICENSE_TRANSFER", {"issuance_id": iid, "to": NULL_ADDRESS, "amount": 10}))
    assert circulating_supply(st, iid) == 90


def test_destroyed_units_can_never_move_again() -> None:
    st = _signed_state()
    iid = _issue(st)
    apply_tx(st, _env("LICENSE_DESTROY", {"issuance_id": iid, "amount": 10}))
    with pytest.raises(AuthorizationError):
        apply_tx(st, _env("LICENSE_TRANSFER", {"issuance_id": iid, "to": A, "amount": 10}, signer=NULL_ADDRESS))


def test_destroy_requires_outright_ownership() -> None:
    st = _signed_state()
    iid = _issue(st)
    apply_tx(st, _env("LICENSE_TRANSFER_RECLAIMABLE", {"issuance_id": iid, "to": B, "amount": 10}))
    with pytest.raises(InsufficientBalanceError):
        apply_tx(st, _env("LICENSE_DESTROY", {"issuance_id": iid, "amount": 10}, signer=B))


def test_zero_amount_transfer_is_recorded() -> None:
    st = _signed_state()
    iid = _issue(st)
    apply_tx(st, _env("LICENSE_TRANSFER", {"issuance_id": iid, "to": B, "amount": 0}))
    last = st["events"][-1]
    assert (last["event"], last["amount"]) == ("Transfer", 0)
    assert balance_of(st, iid, A) == 100


def test_only_issuer_can_revoke() -> None:
    st = _signed_state()
    iid = _issue(st)
    for who in (A, ROOT):
        with pytest.raises(AuthorizationError) as e:
            apply_tx(st, _env("LICENSE_REVOKE", {"issuance_id": iid}, signer=who))
        assert e.value.reason == "issuer_required"
    assert is_revoked(st, iid) is False


def test_revocation_is_scoped_to_one_issuance() -> None:
    st = _signed_state()
    first = _issue(st)
    second = _issue(st)
    apply_tx(st, _env("LICENSE_REVOKE", {"issuance_id": first}, signer=ISSUER))

    apply_tx(st, _env("LICENSE_TRANSFER", {"issuance_id": second, "to": B, "amount": 1}))
    assert balance_of(st, second, B) == 1
    assert balance_of(st, first, A) == 100


def test_unknown_issuance_is_not_found() -> None:
    st = _signed_state()
    with pytest.raises(NotFoundError):
        apply_tx(st, _env("LICENSE_TRANSFER", {"issuance_id": 3, "to": B, "amount": 1}))
    with pytest.raises(NotFoundError):
        balance_of(st, 0, A)


@pytest.mark.parametrize(
    "payload",
    [
        {"issuance_id": "0", "to": B, "amount": 1},
        {"issuance_id": 0, "to": "", "amount": 1},
        {"issuance_id": 0, "to": B, "amount": "1"},
        {"issuance_id": 0, "to": B, "amount": True},
    ],
)
def test_malformed_transfer_payloads_are_rejected(payload: Json) -> None:
    st = _signed_state()
    _issue(st)
    with pytest.raises(ValidationError):
        apply_tx(st, _env("LICENSE_TRANSFER", payload))


def test_null_caller_is_never_accepted() -> None:
    st = _signed_state()
    iid = _issue(st)
    with pytest.raises(AuthorizationError) as e:
        apply_tx(st, _env("LICENSE_RECLAIM", {"issuance_id": iid, "from": A, "amount": 0}, signer=NULL_ADDRESS))
    assert e.value.reason == "null_caller"


def test_unknown_tx_type_fails_closed() -> None:
    with pytest.raises(LedgerError) as e:
        apply_tx(_signed_state(), _env("LICENSE_MINT_MORE", {}))
    assert e.value.code == "tx_unimplemented"


def test_dict_envelopes_are_accepted() -> None:
    st = _signed_state()
    iid = _issue(st)
    meta = apply_tx(
        st,
        {"tx_type": "license_transfer", "signer": A, "nonce": 2, "payload": {"issuance_id": iid, "to": B, "amount": 3}},
    )
    assert meta["applied"] == "LICENSE_TRANSFER"
    assert balance_of(st, iid, B) == 3


def test_reclaiming_from_null_is_refused_and_leaves_no_record() -> None:
    st = _signed_state()
    iid = _issue(st)
    apply_tx(st, _env("LICENSE_DESTROY", {"issuance_id": iid, "amount": 10}))
    n_events = len(st["events"])

    with pytest.raises(AuthorizationError) as e:
        apply_tx_atomic(st, _env("LICENSE_RECLAIM", {"issuance_id": iid, "from": NULL_ADDRESS, "amount": 10}))
    assert e.value.reason == "null_address_debit"
    assert len(st["events"]) == n_events
    assert circulating_supply(st, iid) == 90
