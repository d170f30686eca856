"""Positional merge of transaction hashes into structured log records.

Pairing is by index only: record ``i`` receives hash ``i``. When there are
fewer hashes than records the remaining records get ``None``; surplus hashes
are dropped. A count mismatch is logged, never raised.

:func:`merge` is the side-effect-free core used by :mod:`runner`; it takes
the two input texts and returns the merged records plus a summary.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from pipeline.confirmations import TX_SENT_MARKER, extract_tx_hashes, warn_on_mismatch
from pipeline.errors import CountMismatchWarning, ParseError
from pipeline.tx_logs import RawEntry, loads_strict, parse_structured_log, split_lines

LOG = logging.getLogger(__name__)

DEFAULT_HASH_FIELD = "txHash"


@dataclass(frozen=True)
class MergeReport:
    entries: int
    hashes: int
    matched: int
    null_filled: int
    dropped_hashes: int
    mismatch: Optional[CountMismatchWarning] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries": self.entries,
            "hashes": self.hashes,
            "matched": self.matched,
            "null_filled": self.null_filled,
            "dropped_hashes": self.dropped_hashes,
            "count_mismatch": self.mismatch is not None,
        }


@dataclass(frozen=True)
class MergeResult:
    records: List[Dict[str, Any]]
    report: MergeReport


def decode_entry(raw: RawEntry, *, index: int, source: str = "txLogs.json") -> Dict[str, Any]:
    """
    Normalize one structured log element to a JSON object.

    Strings are double-encoded records and are parsed once more. The returned
    dict is always a fresh copy so callers can add fields freely.
    """
    if isinstance(raw, dict):
        return dict(raw)

    if isinstance(raw, str):
        try:
            decoded = loads_strict(raw)
        except json.JSONDecodeError as exc:
            raise ParseError(f"invalid encoded entry ({exc.msg})", source=source, index=index) from exc
        except ValueError as exc:
            raise ParseError(f"invalid encoded entry ({exc})", source=source, index=index) from exc
        if not isinstance(decoded, dict):
            raise ParseError(
                f"encoded entry must decode to a JSON object, got {type(decoded).__name__}",
                source=source,
                index=index,
            )
        return decoded

    raise ParseError(
        f"entry must be a JSON object or an encoded string, got {type(raw).__name__}",
        source=source,
        index=index,
    )


def attach_hash(record: Dict[str, Any], tx_hash: Optional[str], *, hash_field: str = DEFAULT_HASH_FIELD) -> Dict[str, Any]:
    # Re-inserting keeps the hash field last even when the record already had one.
    record.pop(hash_field, None)
    record[hash_field] = tx_hash
    return record


def merge_entries(
    entries: Sequence[RawEntry],
    hashes: Sequence[str],
    *,
    hash_field: str = DEFAULT_HASH_FIELD,
    source: str = "txLogs.json",
) -> MergeResult:
    """Decode every entry and attach the hash at the same index (or None)."""
    mismatch = warn_on_mismatch(len(hashes), len(entries))

    records: List[Dict[str, Any]] = []
    for i, raw in enumerate(entries):
        record = decode_entry(raw, index=i, source=source)
        tx_hash = hashes[i] if i < len(hashes) else None
        records.append(attach_hash(record, tx_hash, hash_field=hash_field))

    matched = min(len(entries), len(hashes))
    report = MergeReport(
        entries=len(entries),
        hashes=len(hashes),
        matched=matched,
        null_filled=len(entries) - matched,
        dropped_hashes=len(hashes) - matched,
        mismatch=mismatch,
    )
    LOG.debug("merge summary", extra=report.to_dict())
    return MergeResult(records=records, report=report)


def merge(
    structured_text: str,
    confirmation_text: str,
    *,
    marker: str = TX_SENT_MARKER,
    hash_field: str = DEFAULT_HASH_FIELD,
    source: str = "txLogs.json",
) -> MergeResult:
    """
    Merge the two raw input texts.

    Raises ParseError when the structured log, or any double-encoded entry in
    it, is not valid JSON.
    """
    entries = parse_structured_log(structured_text, source=source)
    hashes = extract_tx_hashes(split_lines(confirmation_text), marker)
    return merge_entries(entries, hashes, hash_field=hash_field, source=source)
