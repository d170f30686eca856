"""Loading of the two merge inputs.

- structured log: a JSON array of objects or JSON-encoded object strings
- confirmation log: plain text, one deployment-tool line per row

Both are read whole into memory. Parsing the structured log is fail-fast:
malformed JSON raises :class:`pipeline.errors.ParseError`. Reading the
confirmation log cannot fail beyond the filesystem read itself.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from pipeline.errors import ParseError

LOG = logging.getLogger(__name__)

# An element of the structured log: an object, or an object encoded as a string.
RawEntry = Union[Dict[str, Any], str]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def loads_strict(text: str) -> Any:
    """json.loads that rejects NaN, Infinity and -Infinity like JSON.parse does."""
    return json.loads(text, parse_constant=_reject_constant)


def parse_structured_log(text: str, *, source: str = "txLogs.json") -> List[RawEntry]:
    """Parse the structured log text into its ordered list of raw entries."""
    try:
        payload = loads_strict(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid JSON ({exc.msg} at line {exc.lineno} column {exc.colno})", source=source) from exc
    except ValueError as exc:
        raise ParseError(f"invalid JSON ({exc})", source=source) from exc

    if not isinstance(payload, list):
        raise ParseError(f"expected a JSON array, got {type(payload).__name__}", source=source)
    return payload


def split_lines(text: str) -> List[str]:
    """Split on newline characters only; carriage returns are left for trimming."""
    return text.split("\n")


def load_structured_log(path: str | Path) -> List[RawEntry]:
    p = Path(path)
    entries = parse_structured_log(p.read_text(encoding="utf-8"), source=str(p))
    LOG.debug("loaded structured log %s (%d entries)", p, len(entries))
    return entries


def load_confirmation_lines(path: str | Path) -> List[str]:
    p = Path(path)
    # Raw console output; undecodable bytes become U+FFFD instead of failing.
    lines = split_lines(p.read_text(encoding="utf-8", errors="replace"))
    LOG.debug("loaded confirmation log %s (%d lines)", p, len(lines))
    return lines
