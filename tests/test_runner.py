"""End-to-end tests for the merge runner (files in, merged JSON out)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

import runner
from infra.config import clear_settings_cache
from infra.merge_paths import MergePaths

OUTPUT = "txLogsWithRealHashes.json"


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: Any, tmp_path: Path) -> Any:
    """Run from an empty directory so no `.env` or TXMERGE_* env leaks in."""
    for key in ("TXMERGE_BASE_DIR", "TXMERGE_TX_LOGS", "TXMERGE_TX_HASHES", "TXMERGE_OUTPUT",
                "TXMERGE_MARKER", "TXMERGE_HASH_FIELD", "TXMERGE_LOG_JSON"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


def _write_inputs(base: Path, tx_logs: str, tx_hashes: str) -> None:
    (base / "txLogs.json").write_text(tx_logs, encoding="utf-8")
    (base / "tx-hashes.txt").write_text(tx_hashes, encoding="utf-8")


def test_default_paths_in_working_directory(tmp_path: Path) -> None:
    _write_inputs(tmp_path, '["{\\"event\\":\\"Deploy\\"}"]', "Transaction sent: 0x123\n")

    assert runner.main([]) == 0

    merged = json.loads((tmp_path / OUTPUT).read_text(encoding="utf-8"))
    assert merged == [{"event": "Deploy", "txHash": "0x123"}]


def test_output_is_pretty_printed(tmp_path: Path) -> None:
    _write_inputs(tmp_path, '[{"event": "Deploy"}]', "Transaction sent: 0x1\n")

    runner.main([])

    assert (tmp_path / OUTPUT).read_text(encoding="utf-8") == (
        '[\n  {\n    "event": "Deploy",\n    "txHash": "0x1"\n  }\n]'
    )


def test_count_mismatch_still_writes_output(tmp_path: Path, caplog: Any) -> None:
    caplog.set_level("WARNING")
    _write_inputs(
        tmp_path,
        json.dumps([json.dumps({"i": i}) for i in range(3)]),
        "Transaction sent: 0xa\nsome noise\nTransaction sent: 0xb\n",
    )

    assert runner.main([]) == 0

    merged = json.loads((tmp_path / OUTPUT).read_text(encoding="utf-8"))
    assert [m["txHash"] for m in merged] == ["0xa", "0xb", None]
    warnings = [r.message for r in caplog.records if r.levelname == "WARNING"]
    assert any("3" in m and "2" in m for m in warnings)


def test_malformed_structured_log_aborts_without_output(tmp_path: Path, caplog: Any) -> None:
    caplog.set_level("ERROR")
    _write_inputs(tmp_path, "not json", "Transaction sent: 0x1\n")

    assert runner.main([]) == runner.EXIT_INPUT_ERROR
    assert not (tmp_path / OUTPUT).exists()
    assert any("no output written" in r.message for r in caplog.records)


def test_malformed_entry_leaves_existing_output_untouched(tmp_path: Path) -> None:
    _write_inputs(tmp_path, '["{\\"ok\\": 1}", "{broken"]', "Transaction sent: 0x1\n")
    (tmp_path / OUTPUT).write_text("previous run", encoding="utf-8")

    assert runner.main([]) == runner.EXIT_INPUT_ERROR
    assert (tmp_path / OUTPUT).read_text(encoding="utf-8") == "previous run"


def test_missing_input_file_is_reported(tmp_path: Path) -> None:
    (tmp_path / "txLogs.json").write_text("[]", encoding="utf-8")

    assert runner.main([]) == runner.EXIT_INPUT_ERROR
    assert not (tmp_path / OUTPUT).exists()


def test_base_dir_and_file_overrides(tmp_path: Path) -> None:
    run_dir = tmp_path / "runs" / "1"
    run_dir.mkdir(parents=True)
    _write_inputs(run_dir, '[{"event": "Deploy"}]', "Transaction sent: 0xfeed\n")
    out = tmp_path / "build" / "merged.json"

    assert runner.main(["--base-dir", str(run_dir), "--out", str(out)]) == 0

    assert json.loads(out.read_text(encoding="utf-8")) == [{"event": "Deploy", "txHash": "0xfeed"}]
    assert not (run_dir / OUTPUT).exists()


def test_env_settings_are_used(tmp_path: Path, monkeypatch: Any) -> None:
    _write_inputs(tmp_path, '[{"event": "Deploy"}]', "hash: 0x5\n")
    monkeypatch.setenv("TXMERGE_MARKER", "hash:")
    monkeypatch.setenv("TXMERGE_HASH_FIELD", "hash")
    monkeypatch.setenv("TXMERGE_OUTPUT", "out.json")

    assert runner.main([]) == 0

    assert json.loads((tmp_path / "out.json").read_text(encoding="utf-8")) == [
        {"event": "Deploy", "hash": "0x5"}
    ]


def test_dry_run_does_not_write(tmp_path: Path, capsys: Any) -> None:
    _write_inputs(tmp_path, '[{"a": 1}, {"a": 2}]', "Transaction sent: 0x1\n")

    assert runner.main(["--dry-run"]) == 0

    assert not (tmp_path / OUTPUT).exists()
    out = capsys.readouterr().out
    assert "entries: 2" in out
    assert "null_filled: 1" in out


def test_run_merge_returns_report(tmp_path: Path) -> None:
    _write_inputs(tmp_path, '[{"a": 1}]', "Transaction sent: 0x1\nTransaction sent: 0x2\n")

    result = runner.run_merge(MergePaths(base_dir=tmp_path))

    assert result.records == [{"a": 1, "txHash": "0x1"}]
    assert result.report.dropped_hashes == 1
    assert (tmp_path / OUTPUT).exists()


def test_print_version(capsys: Any) -> None:
    assert runner.main(["--print-version"]) == 0
    assert "ENGINE_NAME=txhashmerge" in capsys.readouterr().out


def test_nan_in_encoded_entry_aborts_without_output(tmp_path: Path) -> None:
    _write_inputs(tmp_path, '["{\\"v\\": NaN}"]', "Transaction sent: 0x1\n")

    assert runner.main([]) == runner.EXIT_INPUT_ERROR
    assert not (tmp_path / OUTPUT).exists()


def test_flags_keep_file_names_from_settings(tmp_path: Path, monkeypatch: Any) -> None:
    run_dir = tmp_path / "run"
    run_dir.mkdir()
    (run_dir / "events.json").write_text('[{"event": "Deploy"}]', encoding="utf-8")
    (run_dir / "tx-hashes.txt").write_text("Transaction sent: 0x2\n", encoding="utf-8")
    monkeypatch.setenv("TXMERGE_TX_LOGS", "events.json")

    assert runner.main(["--base-dir", str(run_dir)]) == 0

    merged = json.loads((run_dir / OUTPUT).read_text(encoding="utf-8"))
    assert merged == [{"event": "Deploy", "txHash": "0x2"}]
