# src/licreg/runtime/contract_config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from licreg.ledger.constants import NULL_ADDRESS, U64_MAX

Json = Dict[str, Any]


def _as_int(v: Any, default: int, *, field: str) -> int:
    """Unset means default; anything set must parse as an integer."""
    if v is None or (isinstance(v, str) and not v.strip()):
        return int(default)
    if isinstance(v, bool):
        raise ValueError(f"{field} must be an integer; got: {v!r}")
    if isinstance(v, int):
        return v
    try:
        return int(str(v).strip())
    except ValueError:
        raise ValueError(f"{field} must be an integer; got: {v!r}") from None


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


@dataclass(frozen=True)
class ContractConfig:
    contract_id: str
    mode: str  # "dev" | "testnet" | "prod"

    # Authorities. The issuer is fixed for the life of the contract; the root
    # can later be reassigned through CONTRACT_ROOT_SET.
    issuer: str
    root: str

    # Certificate descriptor.
    issuer_name: str
    liability: str
    safekeeping_period: int
    issuer_certificate: str

    issuance_fee: int

    api_host: str
    api_port: int

    log_level: str


_ALLOWED_MODES = {"dev", "testnet", "prod"}


def validate_contract_config(cfg: ContractConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.contract_id, str) or not cfg.contract_id.strip():
        raise ValueError("contract_id must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    for name, ident in (("issuer", cfg.issuer), ("root", cfg.root)):
        if not isinstance(ident, str) or not ident.strip():
            raise ValueError(f"{name} must be a non-empty string")
        if ident.strip() == NULL_ADDRESS:
            raise ValueError(f"{name} must not be the null address")

    if int(cfg.safekeeping_period) < 0:
        raise ValueError(f"safekeeping_period must be >= 0; got: {cfg.safekeeping_period}")

    if int(cfg.issuance_fee) < 0 or int(cfg.issuance_fee) > U64_MAX:
        raise ValueError(f"issuance_fee must fit in u64; got: {cfg.issuance_fee}")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")


def default_contract_config() -> ContractConfig:
    return ContractConfig(
        contract_id="licreg-dev",
        # Production-safe default: no docs endpoints, strict CORS.
        mode="prod",
        issuer="",
        root="",
        issuer_name="",
        liability="",
        safekeeping_period=0,
        issuer_certificate="",
        issuance_fee=0,
        api_host="127.0.0.1",
        api_port=8080,
        log_level="INFO",
    )


def _merge(raw: Json, d: ContractConfig) -> ContractConfig:
    return ContractConfig(
        contract_id=_as_str(raw.get("contract_id"), d.contract_id),
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        issuer=_as_str(raw.get("issuer"), d.issuer).strip(),
        root=_as_str(raw.get("root"), d.root).strip(),
        issuer_name=_as_str(raw.get("issuer_name"), d.issuer_name),
        liability=_as_str(raw.get("liability"), d.liability),
        safekeeping_period=_as_int(raw.get("safekeeping_period"), d.safekeeping_period, field="safekeeping_period"),
        issuer_certificate=_as_str(raw.get("issuer_certificate"), d.issuer_certificate),
        issuance_fee=_as_int(raw.get("issuance_fee"), d.issuance_fee, field="issuance_fee"),
        api_host=_as_str(raw.get("api_host"), d.api_host),
        api_port=_as_int(raw.get("api_port"), d.api_port, field="api_port"),
        log_level=_as_str(raw.get("log_level"), d.log_level).strip().upper(),
    )


def read_contract_config_file(path: str) -> ContractConfig:
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("contract config must be a JSON object")

    cfg = _merge(raw, default_contract_config())
    validate_contract_config(cfg)
    return cfg


_ENV_KEYS = {
    "contract_id": "LICREG_CONTRACT_ID",
    "mode": "LICREG_MODE",
    "issuer": "LICREG_ISSUER",
    "root": "LICREG_ROOT",
    "issuer_name": "LICREG_ISSUER_NAME",
    "liability": "LICREG_LIABILITY",
    "safekeeping_period": "LICREG_SAFEKEEPING_PERIOD",
    "issuer_certificate": "LICREG_ISSUER_CERTIFICATE",
    "issuance_fee": "LICREG_ISSUANCE_FEE",
    "api_host": "LICREG_API_HOST",
    "api_port": "LICREG_API_PORT",
    "log_level": "LICREG_LOG_LEVEL",
}


def load_contract_config(*, config_path: Optional[str] = None) -> ContractConfig:
    """Load config from a JSON file, else from LICREG_* environment variables."""
    p = config_path or os.environ.get("LICREG_CONTRACT_CONFIG_PATH")
    if p:
        return read_contract_config_file(p)

    raw = {k: os.environ.get(env_name) for k, env_name in _ENV_KEYS.items()}
    cfg = _merge(raw, default_contract_config())
    validate_contract_config(cfg)
    return cfg


__all__ = [
    "ContractConfig",
    "default_contract_config",
    "load_contract_config",
    "read_contract_config_file",
    "validate_contract_config",
]
