from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

import cli
from infra.config import clear_settings_cache


def test_hashes_command_prints_sequence(tmp_path: Path, capsys: Any) -> None:
    log = tmp_path / "forge.txt"
    log.write_text("noise\nTransaction sent: 0x1\nTransaction sent: 0x2\n", encoding="utf-8")

    assert cli.main(["hashes", "--tx-hashes", str(log)]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[:2] == ["0x1", "0x2"]
    assert lines[2].startswith("# 2 hashes")


def test_hashes_command_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        cli.main(["hashes", "--tx-hashes", str(tmp_path / "missing.txt")])


def test_merge_command_delegates_to_runner(tmp_path: Path, monkeypatch: Any) -> None:
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    (tmp_path / "txLogs.json").write_text('[{"event": "Deploy"}]', encoding="utf-8")
    (tmp_path / "tx-hashes.txt").write_text("Transaction sent: 0xabc\n", encoding="utf-8")

    assert cli.main(["merge", "--base-dir", str(tmp_path)]) == 0

    merged = json.loads((tmp_path / "txLogsWithRealHashes.json").read_text(encoding="utf-8"))
    assert merged == [{"event": "Deploy", "txHash": "0xabc"}]
    clear_settings_cache()


def test_hashes_command_uses_settings(tmp_path: Path, monkeypatch: Any, capsys: Any) -> None:
    monkeypatch.chdir(tmp_path)
    run_dir = tmp_path / "run"
    run_dir.mkdir()
    (run_dir / "forge.txt").write_text("hash=0xa\nTransaction sent: 0xb\n", encoding="utf-8")
    (tmp_path / ".env").write_text(
        "MERGE__BASE_DIR=run\nMERGE__TX_HASHES_FILE=forge.txt\nMERGE__MARKER=hash=\n",
        encoding="utf-8",
    )
    for key in ("MERGE__BASE_DIR", "MERGE__TX_HASHES_FILE", "MERGE__MARKER"):
        monkeypatch.delenv(key, raising=False)

    assert cli.main(["hashes"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "0xa"
    assert lines[1].startswith("# 1 hashes")
    clear_settings_cache()
