"""
自由文本提取 (Freeform Text Extraction)
======================================

逐行按分隔符切分。每个片段若在中间出现中文，则拆成“前缀 + 中文释义”
两列，例如 ``adj. 快乐的`` -> ``["adj", "快乐的"]``。每个非空行恰好
产生一条记录。
"""

from __future__ import annotations

from typing import List

from lingovault.extract.base import LINE_KEY, LINE_SPLIT_RE, Record, build_positional_record
from lingovault.logger import get_logger
from lingovault.text import first_cjk_index, strip_leading_separators, strip_trailing_punctuation

logger = get_logger(__name__)


def expand_cjk_segment(segment: str) -> List[str]:
    trimmed = (segment or "").strip()
    if not trimmed:
        return [""]

    idx = first_cjk_index(trimmed)
    if idx > 0:
        prefix = strip_trailing_punctuation(trimmed[:idx])
        meaning = strip_leading_separators(trimmed[idx:])
        expanded = [part for part in (prefix, meaning) if part]
        if expanded:
            return expanded

    return [trimmed]


def build_text_records(raw_data: str, delimiter: str = "\t") -> List[Record]:
    lines = [line.strip() for line in LINE_SPLIT_RE.split(raw_data or "")]
    lines = [line for line in lines if line]

    records: List[Record] = []
    for line_no, line in enumerate(lines, start=1):
        raw_tokens = line.split(delimiter) if delimiter else [line]
        parts: List[str] = []
        for token in raw_tokens:
            parts.extend(expand_cjk_segment(token))
        if not parts:
            parts.append(line)

        record = build_positional_record(parts, parts)
        record[LINE_KEY] = line_no
        records.append(record)

    logger.info("Text extraction: %d records (delimiter=%r)", len(records), delimiter)
    return records
