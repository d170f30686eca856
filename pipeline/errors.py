"""Error and warning types shared by the merge pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# -----------------------------
# Exceptions
# -----------------------------


class TxMergeError(ValueError):
    """Base merge error."""


class ParseError(TxMergeError):
    """Raised when the structured log (or one of its entries) is not valid JSON."""

    def __init__(self, message: str, *, source: str, index: Optional[int] = None) -> None:
        self.source = source
        self.index = index
        where = source if index is None else f"{source}[{index}]"
        super().__init__(f"{where}: {message}")


# -----------------------------
# Warnings (non-fatal)
# -----------------------------


@dataclass(frozen=True)
class CountMismatchWarning:
    """Hash count differs from structured log count. Advisory only."""

    hash_count: int
    log_count: int

    @property
    def missing(self) -> int:
        """Records that will receive a null hash."""
        return max(0, self.log_count - self.hash_count)

    @property
    def surplus(self) -> int:
        """Hashes that will be dropped."""
        return max(0, self.hash_count - self.log_count)

    def message(self) -> str:
        return (
            "txHashes count does not match txLogs count: "
            f"txHashes={self.hash_count} txLogs={self.log_count}"
        )
