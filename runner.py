"""
runner.py

Tx hash merge runner (structured tx log + deployment tool output -> merged JSON).

Pipeline:
  txLogs.json    -> structured entries --+
                                         +-> positional merge -> txLogsWithRealHashes.json
  tx-hashes.txt  -> "Transaction sent:" hashes

Pairing is by position only. A count mismatch is reported as a warning and the
merge continues (missing hashes become null, surplus hashes are dropped).
Malformed JSON aborts the run before anything is written.

Default paths are relative to the working directory:
python runner.py

Point at another run directory:
python runner.py --base-dir out/deploy-2026-10-17

Override single files:
python runner.py --tx-logs logs/txLogs.json --tx-hashes logs/forge.txt --out build/merged.json

Check counts without writing:
python runner.py --dry-run
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from infra.config import get_settings
from infra.logging_config import setup_logging
from infra.merge_paths import MergePaths
from pipeline.confirmations import TX_SENT_MARKER, extract_tx_hashes
from pipeline.errors import ParseError
from pipeline.merge import MergeResult, merge_entries
from pipeline.tx_logs import load_confirmation_lines, load_structured_log
from pipeline.writer_json import write_merged_json
from version import ENGINE_NAME, ENGINE_VERSION

LOG = logging.getLogger("runner")

EXIT_OK = 0
EXIT_INPUT_ERROR = 2


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Merge deployment tx hashes into structured tx logs")

    parser.add_argument(
        "--base-dir",
        default="",
        help="Directory holding txLogs.json / tx-hashes.txt and receiving the output (default: .)",
    )
    parser.add_argument("--tx-logs", default="", help="Structured log path (overrides --base-dir)")
    parser.add_argument("--tx-hashes", default="", help="Confirmation log path (overrides --base-dir)")
    parser.add_argument("--out", default="", help="Merged output path (overrides --base-dir)")

    parser.add_argument(
        "--marker",
        default=None,
        help=f"Substring identifying confirmation lines (default: {TX_SENT_MARKER!r})",
    )
    parser.add_argument("--hash-field", default=None, help="Field added to each record (default: txHash)")

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load and merge, report counts, but do not write the output file.",
    )

    # Logging
    parser.add_argument("--log-level", default=None, help="DEBUG|INFO|WARNING|ERROR (or TXMERGE_LOG_LEVEL)")
    parser.add_argument("--json-logs", action="store_true", default=None, help="Emit JSON log lines.")

    # Convenience
    parser.add_argument(
        "--print-version",
        action="store_true",
        help="Print engine version and exit.",
    )

    return parser.parse_args(argv)


def _resolve_paths(args: argparse.Namespace, base: MergePaths) -> MergePaths:
    # CLI flags win over settings; empty flags keep the settings value.
    return base.with_overrides(
        base_dir=args.base_dir.strip(),
        tx_logs=args.tx_logs.strip(),
        tx_hashes=args.tx_hashes.strip(),
        output=args.out.strip(),
    )


def run_merge(
    paths: MergePaths,
    *,
    marker: str = TX_SENT_MARKER,
    hash_field: str = "txHash",
    dry_run: bool = False,
) -> MergeResult:
    """
    Load both inputs, merge, then write the output once.

    Raises ParseError / FileNotFoundError before any write happens.
    """
    tx_logs_path = paths.tx_logs_path()
    entries = load_structured_log(tx_logs_path)
    lines = load_confirmation_lines(paths.tx_hashes_path())

    hashes = extract_tx_hashes(lines, marker)
    result = merge_entries(entries, hashes, hash_field=hash_field, source=str(tx_logs_path))

    if dry_run:
        LOG.info("Dry run: %d merged records not written", len(result.records))
        return result

    write_merged_json(paths.output_path(), result.records)
    return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    if args.print_version:
        print(f"ENGINE_NAME={ENGINE_NAME}")
        print(f"ENGINE_VERSION={ENGINE_VERSION}")
        return EXIT_OK

    setup_logging(
        level=args.log_level,
        json_logs=args.json_logs,
        extra_fields={"engine": ENGINE_NAME, "engine_version": ENGINE_VERSION},
    )

    cfg = get_settings().merge
    paths = _resolve_paths(args, MergePaths.from_config(cfg))
    marker = args.marker if args.marker else cfg.marker
    hash_field = (args.hash_field or "").strip() or cfg.hash_field

    try:
        result = run_merge(paths, marker=marker, hash_field=hash_field, dry_run=args.dry_run)
    except ParseError as exc:
        LOG.error("Aborting, no output written: %s", exc)
        return EXIT_INPUT_ERROR
    except FileNotFoundError as exc:
        LOG.error("Aborting, input file missing: %s", exc.filename or exc)
        return EXIT_INPUT_ERROR

    report = result.report
    print("=== Merge summary ===")
    print(f"tx_logs: {paths.tx_logs_path()}")
    print(f"tx_hashes: {paths.tx_hashes_path()}")
    print(f"output: {'(dry run)' if args.dry_run else paths.output_path()}")
    print(f"entries: {report.entries}")
    print(f"hashes: {report.hashes}")
    print(f"matched: {report.matched}")
    print(f"null_filled: {report.null_filled}")
    print(f"dropped_hashes: {report.dropped_hashes}")

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
