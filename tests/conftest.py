"""Shared pytest fixtures for pkgledger tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgledger.modules.config import LedgerConfig
from pkgledger.modules.ledger import PackageLedger


@pytest.fixture
def conf_file(tmp_path: Path) -> Path:
    """Config that logs everything to files under tmp_path and nothing to the console."""
    path = tmp_path / "pkgledger.conf"
    path.write_text(
        "[ledger]\n"
        f"file = {tmp_path / 'state' / 'ledger.json'}\n"
        "[logging]\n"
        "level = debug\n"
        "log_to_console = false\n"
        "log_to_file = true\n"
        f"log_file = {tmp_path / 'logs' / 'pkgledger.log'}\n"
        f"history_file = {tmp_path / 'logs' / 'history.log'}\n"
    )
    return path


@pytest.fixture
def cfg(conf_file: Path) -> LedgerConfig:
    return LedgerConfig(locations=[str(conf_file)], required=True)


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "ledger.json"


@pytest.fixture
def ledger(ledger_path: Path, cfg: LedgerConfig) -> PackageLedger:
    """Fresh, empty ledger backed by a file under tmp_path."""
    return PackageLedger(str(ledger_path), cfg=cfg)


@pytest.fixture
def reopen(ledger_path: Path, cfg: LedgerConfig):
    """Load a second ledger instance from the same file."""

    def _reopen(**kwargs) -> PackageLedger:
        return PackageLedger(str(ledger_path), cfg=cfg, **kwargs)

    return _reopen
