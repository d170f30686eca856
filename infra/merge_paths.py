"""Path conventions for merge inputs and output.

All code that needs to know where the structured log, the confirmation log
and the merged artifact live should go through
:class:`infra.merge_paths.MergePaths`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from infra.config import (
    DEFAULT_OUTPUT_FILE,
    DEFAULT_TX_HASHES_FILE,
    DEFAULT_TX_LOGS_FILE,
    MergeConfig,
)


def _p(path: str | Path) -> Path:
    return path if isinstance(path, Path) else Path(str(path))


@dataclass(frozen=True)
class MergePaths:
    """
    Central path conventions for one merge run.

    Rules:
      - Callers may override the *base directory* or any single file (CLI flags)
      - Default file names live here, not scattered in code
      - Overrides are used verbatim; they are not joined to the base directory

    This class should be the ONLY place that knows the canonical layout.
    """

    base_dir: Path = Path(".")

    tx_logs_filename: str = DEFAULT_TX_LOGS_FILE
    tx_hashes_filename: str = DEFAULT_TX_HASHES_FILE
    output_filename: str = DEFAULT_OUTPUT_FILE

    # Optional overrides (used by CLI to point elsewhere)
    tx_logs_override: Optional[Path] = None
    tx_hashes_override: Optional[Path] = None
    output_override: Optional[Path] = None

    def __post_init__(self) -> None:
        # Validate the important invariants early so misuse fails fast.
        for name in ("base_dir", "tx_logs_override", "tx_hashes_override", "output_override"):
            val = getattr(self, name)
            if val is None:
                continue
            if not isinstance(val, Path):
                raise TypeError(f"{name} must be a pathlib.Path (got {type(val)})")

        for fname in ("tx_logs_filename", "tx_hashes_filename", "output_filename"):
            v = getattr(self, fname)
            if not isinstance(v, str) or not v.strip():
                raise ValueError(f"{fname} must be a non-empty string")
            if "/" in v or "\\" in v:
                raise ValueError(f"{fname} must be a simple file name, not a path: {v!r}")

    # -------------------------
    # Resolved files
    # -------------------------

    def tx_logs_path(self) -> Path:
        return self.tx_logs_override or (self.base_dir / self.tx_logs_filename)

    def tx_hashes_path(self) -> Path:
        return self.tx_hashes_override or (self.base_dir / self.tx_hashes_filename)

    def output_path(self) -> Path:
        return self.output_override or (self.base_dir / self.output_filename)

    # -------------------------
    # Overrides and constructors
    # -------------------------

    def with_overrides(
        self,
        *,
        base_dir: str | Path | None = None,
        tx_logs: str | Path | None = None,
        tx_hashes: str | Path | None = None,
        output: str | Path | None = None,
    ) -> "MergePaths":
        """
        Preferred way for runner/CLI to override locations without changing conventions.
        Unset (None or empty) arguments keep the current value.
        """
        return replace(
            self,
            base_dir=_p(base_dir) if base_dir else self.base_dir,
            tx_logs_override=_p(tx_logs) if tx_logs else self.tx_logs_override,
            tx_hashes_override=_p(tx_hashes) if tx_hashes else self.tx_hashes_override,
            output_override=_p(output) if output else self.output_override,
        )

    @classmethod
    def from_config(cls, cfg: MergeConfig) -> "MergePaths":
        """
        Build paths from settings. Values containing a separator are treated as
        full paths (overrides); bare names are resolved under ``base_dir``.
        """

        def _split(value: str, default_name: str) -> tuple[str, Optional[Path]]:
            if "/" in value or "\\" in value:
                return default_name, Path(value)
            return value, None

        logs_name, logs_override = _split(cfg.tx_logs_file, DEFAULT_TX_LOGS_FILE)
        hashes_name, hashes_override = _split(cfg.tx_hashes_file, DEFAULT_TX_HASHES_FILE)
        out_name, out_override = _split(cfg.output_file, DEFAULT_OUTPUT_FILE)

        return cls(
            base_dir=Path(cfg.base_dir),
            tx_logs_filename=logs_name,
            tx_hashes_filename=hashes_name,
            output_filename=out_name,
            tx_logs_override=logs_override,
            tx_hashes_override=hashes_override,
            output_override=out_override,
        )
