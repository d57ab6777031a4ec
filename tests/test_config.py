"""Tests for LedgerConfig — INI lookup and fallbacks."""

from pathlib import Path

import pytest

from pkgledger.modules.config import DEFAULT_LEDGER_FILE, LedgerConfig, default_locations


class TestLookup:
    def test_first_existing_file_wins(self, tmp_path: Path) -> None:
        first = tmp_path / "missing.conf"
        second = tmp_path / "second.conf"
        third = tmp_path / "third.conf"
        second.write_text("[ledger]\nfile = /srv/second.json\n")
        third.write_text("[ledger]\nfile = /srv/third.json\n")
        cfg = LedgerConfig(locations=[str(first), str(second), str(third)])
        assert cfg.loaded_from == str(second)
        assert cfg.ledger_file() == "/srv/second.json"

    def test_no_file_uses_defaults(self, tmp_path: Path) -> None:
        cfg = LedgerConfig(locations=[str(tmp_path / "nope.conf")])
        assert cfg.loaded_from is None
        assert cfg.ledger_file() == DEFAULT_LEDGER_FILE
        assert cfg.get("logging", "level", fallback="warning") == "warning"

    def test_required_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            LedgerConfig(locations=[str(tmp_path / "nope.conf")], required=True)

    def test_env_var_goes_first(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PKGLEDGER_CONF", "/tmp/custom.conf")
        assert default_locations()[0] == "/tmp/custom.conf"
        monkeypatch.delenv("PKGLEDGER_CONF")
        assert "/tmp/custom.conf" not in default_locations()

    def test_ledger_file_expands_user(self, tmp_path: Path) -> None:
        conf = tmp_path / "c.conf"
        conf.write_text("[ledger]\nfile = ~/ledger.json\n")
        cfg = LedgerConfig(locations=[str(conf)])
        assert not cfg.ledger_file().startswith("~")


class TestAccessors:
    @pytest.fixture
    def cfg(self, tmp_path: Path) -> LedgerConfig:
        conf = tmp_path / "c.conf"
        conf.write_text(
            "[logging]\n"
            "color_output = no\n"
            "max_log_size_kb = 64\n"
            "bad_int = lots\n"
        )
        return LedgerConfig(locations=[str(conf)])

    def test_typed_values(self, cfg: LedgerConfig) -> None:
        assert cfg.getboolean("logging", "color_output", fallback=True) is False
        assert cfg.getint("logging", "max_log_size_kb") == 64

    def test_fallbacks(self, cfg: LedgerConfig) -> None:
        assert cfg.getint("logging", "bad_int", fallback=7) == 7
        assert cfg.getboolean("missing", "x", fallback=True) is True
        assert cfg.get("missing", "x") is None
