"""
JSON 提取 (JSON Extraction)
==========================

整体解析 JSON；可选 record_path 定位记录容器。整体解析失败时按行回退
（JSON Lines），逐行解析并丢弃坏行。
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from lingovault.extract.base import LINE_SPLIT_RE, Record
from lingovault.logger import get_logger
from lingovault.plan.path import resolve_path

logger = get_logger(__name__)


def _object_records(container: Any) -> List[Record]:
    if isinstance(container, list):
        return [item for item in container if isinstance(item, dict)]
    if isinstance(container, dict):
        return [container]
    return []


def parse_json_lines(raw_data: str) -> List[Record]:
    """逐行解析；无法解析或不是对象的行被丢弃，不影响其它行。"""
    items: List[Record] = []
    dropped = 0
    for line_no, line in enumerate(LINE_SPLIT_RE.split(raw_data or ""), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            parsed = json.loads(line)
        except (json.JSONDecodeError, RecursionError) as exc:
            dropped += 1
            logger.debug("Dropping malformed JSON line %d: %s", line_no, exc)
            continue
        if isinstance(parsed, dict):
            items.append(parsed)
        else:
            dropped += 1
            logger.debug("Dropping JSON line %d: %s is not an object", line_no, type(parsed).__name__)
    if dropped:
        logger.warning("JSON lines recovery kept %d records, dropped %d lines", len(items), dropped)
    return items


def parse_json_records(raw_data: str, record_path: Optional[str] = None) -> List[Record]:
    try:
        parsed = json.loads(raw_data)
    except (json.JSONDecodeError, TypeError, RecursionError):
        logger.info("Input is not a single JSON document; trying line-delimited recovery")
        return parse_json_lines(raw_data)

    container = resolve_path(parsed, record_path) if record_path else parsed
    records = _object_records(container)
    if not records:
        logger.warning("No JSON object records found (record_path=%r)", record_path)
    return records
