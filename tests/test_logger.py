"""Tests for the leveled Logger."""

import json
from pathlib import Path

import pytest

from pkgledger.modules.config import LedgerConfig
from pkgledger.modules.logger import Logger


def make_cfg(tmp_path: Path, **options: str) -> LedgerConfig:
    lines = ["[logging]"]
    lines.append(f"log_file = {tmp_path / 'logs' / 'main.log'}")
    lines.append(f"history_file = {tmp_path / 'logs' / 'history.log'}")
    lines.extend(f"{key} = {value}" for key, value in options.items())
    conf = tmp_path / "log.conf"
    conf.write_text("\n".join(lines) + "\n")
    return LedgerConfig(locations=[str(conf)])


class TestLevels:
    def test_below_min_level_is_dropped(self, tmp_path: Path) -> None:
        log = Logger("t", make_cfg(tmp_path, level="warning", log_to_file="yes", log_to_console="no"))
        log.info("quiet message")
        log.warning("loud message")
        text = (tmp_path / "logs" / "main.log").read_text()
        assert "quiet message" not in text
        assert "[t] [WARNING] loud message" in text

    def test_console_goes_to_stderr(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        log = Logger("t", make_cfg(tmp_path, level="debug", color_output="no"))
        log.debug("hello console")
        captured = capsys.readouterr()
        assert "hello console" in captured.err
        assert captured.out == ""

    def test_file_logging_off_by_default(self, tmp_path: Path) -> None:
        log = Logger("t", make_cfg(tmp_path, log_to_console="no"))
        log.warning("nothing on disk")
        assert not (tmp_path / "logs").exists()


class TestFormatting:
    def test_json_lines(self, tmp_path: Path) -> None:
        log = Logger("t", make_cfg(tmp_path, level="info", log_format="json",
                                   log_to_file="yes", log_to_console="no"))
        log.success("done")
        record = json.loads((tmp_path / "logs" / "main.log").read_text().strip())
        assert record["logger"] == "t"
        assert record["level"] == "SUCCESS"
        assert record["message"] == "done"

    def test_history_ignores_min_level(self, tmp_path: Path) -> None:
        log = Logger("t", make_cfg(tmp_path, level="error", log_to_file="yes", log_to_console="no"))
        log.info("installed x@1", to_history=True)
        assert "installed x@1" in (tmp_path / "logs" / "history.log").read_text()
        assert not (tmp_path / "logs" / "main.log").exists()

    def test_rotation(self, tmp_path: Path) -> None:
        log = Logger("t", make_cfg(tmp_path, level="info", log_to_file="yes",
                                   log_to_console="no", max_log_size_kb="1"))
        for i in range(40):
            log.info("x" * 60 + str(i))
        assert (tmp_path / "logs" / "main.log.1").exists()
        assert (tmp_path / "logs" / "main.log").stat().st_size <= 2048
