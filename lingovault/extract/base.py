"""
Record contract shared by every extraction strategy.

A record is a flat dict. Delimited and text rows are keyed three ways at
once (header name, ``columnN``, and the zero-based index as a string) so
a field map can use whichever style the model picked. The raw split
tokens live under ``RAW_PARTS_KEY`` for the heuristic repair step.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence

Record = Dict[str, Any]

RAW_PARTS_KEY = "__parts"
LINE_KEY = "__line"

LINE_SPLIT_RE = re.compile(r"\r?\n")


def column_key(index: int) -> str:
    """Zero-based position -> ``columnN`` (1-based)."""
    return f"column{index + 1}"


def build_positional_record(
    values: Sequence[str],
    parts: Sequence[str],
    headers: Optional[Sequence[str]] = None,
) -> Record:
    record: Record = {}
    for idx in range(len(headers) if headers is not None else len(values)):
        value = values[idx] if idx < len(values) else ""
        if headers is not None:
            record[headers[idx]] = value
        record[column_key(idx)] = value
        record[str(idx)] = value
    record[RAW_PARTS_KEY] = list(parts)
    return record


def raw_parts(record: Record) -> List[Any]:
    parts = record.get(RAW_PARTS_KEY)
    return parts if isinstance(parts, list) else []
