from __future__ import annotations

import os
from pathlib import Path

import pytest

import licreg.env as env_mod


def test_dotenv_loads_once_without_overriding(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    p = tmp_path / ".env"
    p.write_text("LICREG_TEST_FROM_FILE=file\nLICREG_TEST_PRESET=file\n", encoding="utf-8")

    monkeypatch.setattr(env_mod, "_LOADED", False)
    monkeypatch.setenv("LICREG_TEST_PRESET", "process")
    monkeypatch.setenv("LICREG_TEST_FROM_FILE", "placeholder")
    monkeypatch.delenv("LICREG_TEST_FROM_FILE")

    assert env_mod.load_dotenv_if_present(str(p)) is True
    assert os.environ["LICREG_TEST_FROM_FILE"] == "file"
    assert os.environ["LICREG_TEST_PRESET"] == "process"

    # Second call is a no-op.
    assert env_mod.load_dotenv_if_present(str(p)) is False


def test_missing_dotenv_is_not_an_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(env_mod, "_LOADED", False)
    assert env_mod.load_dotenv_if_present(str(tmp_path / "absent.env")) is False
