"""Extraction of transaction hashes from the deployment tool's text output.

A confirmation line looks like::

    Transaction sent: 0x5c504ed432cb51138bcf09aa5e8a410dd4a1e204ef84bfed1be16dfba1b22060

Lines without the marker are ignored. Hashes are returned in file order and
are not validated: duplicates, odd formats and empty values pass through.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from pipeline.errors import CountMismatchWarning

LOG = logging.getLogger(__name__)

TX_SENT_MARKER = "Transaction sent:"


def filter_confirmation_lines(lines: Iterable[str], marker: str = TX_SENT_MARKER) -> List[str]:
    return [line for line in lines if marker in line]


def extract_tx_hash(line: str, marker: str = TX_SENT_MARKER) -> str:
    """Return the trimmed text between the first marker and the next one (or line end)."""
    return line.split(marker)[1].strip()


def extract_tx_hashes(lines: Iterable[str], marker: str = TX_SENT_MARKER) -> List[str]:
    return [extract_tx_hash(line, marker) for line in filter_confirmation_lines(lines, marker)]


def check_counts(hash_count: int, log_count: int) -> Optional[CountMismatchWarning]:
    if hash_count == log_count:
        return None
    return CountMismatchWarning(hash_count=hash_count, log_count=log_count)


def warn_on_mismatch(hash_count: int, log_count: int) -> Optional[CountMismatchWarning]:
    """Log a warning when counts differ. Never raises; pairing stays positional."""
    mismatch = check_counts(hash_count, log_count)
    if mismatch is not None:
        LOG.warning(
            mismatch.message(),
            extra={"hash_count": hash_count, "log_count": log_count},
        )
    return mismatch
