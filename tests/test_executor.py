from __future__ import annotations

import json
import logging
from dataclasses import replace

import pytest

from licreg.ledger.registry import balance_of
from licreg.runtime.contract_config import ContractConfig, default_contract_config
from licreg.runtime.errors import LedgerError, StateError
from licreg.runtime.executor import ExecutorError, LicenseExecutor


def _cfg(**overrides) -> ContractConfig:
    base = replace(default_contract_config(), issuer="issuer", root="root", contract_id="c-test", mode="dev")
    return replace(base, **overrides)


def _boot() -> LicenseExecutor:
    ex = LicenseExecutor(cfg=_cfg())
    ex.apply({"tx_type": "CONTRACT_SIGN", "signer": "issuer", "payload": {"signature": "s"}})
    ex.apply(
        {
            "tx_type": "LICENSE_ISSUE",
            "signer": "issuer",
            "payload": {"original_supply": 10, "initial_owner": "alice", "audit_time": 0},
        }
    )
    return ex


def test_genesis_state_comes_from_config() -> None:
    ex = LicenseExecutor(cfg=_cfg(issuance_fee=7, issuer_name="Acme"))
    st = ex.read_state()
    assert st["contract"]["issuer"] == "issuer"
    assert st["contract"]["issuance_fee"] == 7
    assert st["contract"]["issuer_name"] == "Acme"
    assert st["contract"]["signed"] is False
    assert st["issuances"] == [] and st["events"] == []


def test_read_state_is_a_detached_copy() -> None:
    ex = _boot()
    snap = ex.read_state()
    snap["issuances"][0]["balances"]["alice"]["alice"] = 999
    assert balance_of(ex.read_state(), 0, "alice") == 10


def test_apply_raises_typed_errors_and_leaves_state_alone() -> None:
    ex = _boot()
    ex.apply({"tx_type": "LICENSE_REVOKE", "signer": "issuer", "payload": {"issuance_id": 0}})
    before = ex.read_state()

    with pytest.raises(StateError) as e:
        ex.apply({"tx_type": "LICENSE_DESTROY", "signer": "alice", "payload": {"issuance_id": 0, "amount": 1}})
    assert e.value.code == "invalid_state"
    assert e.value.reason == "issuance_revoked"
    assert ex.read_state() == before


def test_admission_failures_surface_as_ledger_errors() -> None:
    ex = _boot()
    with pytest.raises(LedgerError) as e:
        ex.apply({"tx_type": "NOPE", "signer": "alice", "payload": {}})
    assert e.value.code == "tx_unimplemented"


def _tx_records(caplog: pytest.LogCaptureFixture) -> list:
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == "licreg.executor"]


def test_apply_logs_jsonl_events(caplog: pytest.LogCaptureFixture) -> None:
    ex = _boot()
    with caplog.at_level(logging.INFO, logger="licreg.executor"):
        ex.apply(
            {"tx_type": "LICENSE_TRANSFER", "signer": "alice", "nonce": 4, "payload": {"issuance_id": 0, "to": "bob", "amount": 2}}
        )
        with pytest.raises(LedgerError):
            ex.apply({"tx_type": "LICENSE_TRANSFER", "signer": "bob", "payload": {"issuance_id": 0, "to": "alice", "amount": 5}})

    records = _tx_records(caplog)
    assert [r["event"] for r in records] == ["tx_applied", "tx_rejected"]
    assert records[0]["meta"]["applied"] == "LICENSE_TRANSFER"
    assert (records[0]["contract_id"], records[0]["nonce"], records[0]["issuance_id"]) == ("c-test", 4, 0)
    assert (records[1]["stage"], records[1]["code"]) == ("apply", "insufficient_balance")


def test_admission_rejections_are_logged_too(caplog: pytest.LogCaptureFixture) -> None:
    ex = _boot()
    with caplog.at_level(logging.INFO, logger="licreg.executor"):
        with pytest.raises(LedgerError):
            ex.apply({"tx_type": "LICENSE_TRANSFER", "signer": "alice", "payload": [1, 2]})
        with pytest.raises(LedgerError):
            ex.apply({"tx_type": "license_revoke", "signer": "", "payload": {"issuance_id": 0}})
        with pytest.raises(LedgerError):
            ex.apply({"tx_type": "LICENSE_TRANSFER", "signer": "alice", "nonce": -1, "payload": {}})

    records = _tx_records(caplog)
    assert [r["event"] for r in records] == ["tx_rejected"] * 3
    assert all(r["stage"] == "admission" for r in records)
    assert [r["code"] for r in records] == ["invalid_payload", "forbidden", "invalid_envelope"]
    assert (records[1]["tx_type"], records[1]["issuance_id"]) == ("LICENSE_REVOKE", 0)


def test_loading_a_snapshot_validates_it() -> None:
    ex = _boot()
    snap = ex.read_state()

    again = LicenseExecutor(cfg=_cfg(), state=snap)
    assert balance_of(again.read_state(), 0, "alice") == 10

    snap["issuances"][0]["balances"]["alice"]["alice"] = 11
    with pytest.raises(ExecutorError):
        LicenseExecutor(cfg=_cfg(), state=snap)
