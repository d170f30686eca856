"""
txmerge CLI (flat-layout friendly).

Usage
-----
txmerge merge --base-dir out/deploy-1
txmerge merge --tx-logs txLogs.json --tx-hashes tx-hashes.txt --out merged.json --dry-run
txmerge hashes --tx-hashes tx-hashes.txt
"""

from __future__ import annotations

import argparse
from typing import List, Optional

import runner
from infra.config import get_settings
from infra.merge_paths import MergePaths
from pipeline.confirmations import TX_SENT_MARKER, extract_tx_hashes
from pipeline.tx_logs import load_confirmation_lines


def cmd_merge(args: argparse.Namespace) -> int:
    return runner.main(list(args.runner_args))


def cmd_hashes(args: argparse.Namespace) -> int:
    # Same resolution as the runner: settings (.env + env), then flags.
    cfg = get_settings(reload=True).merge
    paths = MergePaths.from_config(cfg).with_overrides(tx_hashes=args.tx_hashes)
    path = paths.tx_hashes_path()
    marker = args.marker or cfg.marker

    if not path.exists():
        raise SystemExit(f"confirmation log not found: {path}")

    hashes = extract_tx_hashes(load_confirmation_lines(path), marker)
    for h in hashes:
        print(h)
    print(f"# {len(hashes)} hashes in {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="txmerge", description="Tx hash merge CLI")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("merge", help="Merge tx hashes into the structured log (calls runner).")
    sp.set_defaults(func=cmd_merge)

    sp = sub.add_parser("hashes", help="Print the hashes extracted from a confirmation log.")
    sp.add_argument("--tx-hashes", default=None, help="Confirmation log path (default: from settings, tx-hashes.txt).")
    sp.add_argument("--marker", default=None, help=f"Marker substring. Default: {TX_SENT_MARKER!r}")
    sp.set_defaults(func=cmd_hashes)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    # Unknown flags are runner flags, only accepted by `merge`.
    args, extra = parser.parse_known_args(argv)
    if extra and args.cmd != "merge":
        parser.error(f"unrecognized arguments: {' '.join(extra)}")
    args.runner_args = extra
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
