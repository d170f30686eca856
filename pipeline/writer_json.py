"""JSON writer for the merged transaction log."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Sequence

LOG = logging.getLogger(__name__)


def render_merged_json(records: Sequence[Dict[str, Any]]) -> str:
    # Key insertion order is kept: original fields first, hash field last.
    # allow_nan=False: NaN/Infinity are not JSON and strict readers reject them.
    return json.dumps(list(records), indent=2, ensure_ascii=False, allow_nan=False)


def write_merged_json(path: str | Path, records: Sequence[Dict[str, Any]]) -> Path:
    """Write *records* to *path* (atomically best-effort), replacing any existing file."""

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    tmp = out.with_suffix(out.suffix + ".tmp")

    payload = render_merged_json(records)
    try:
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(out)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise

    LOG.info("Merged tx logs written to %s", out, extra={"output": str(out), "records": len(records)})
    return out
