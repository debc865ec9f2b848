"""
分隔文本提取 (Delimited Extraction)
==================================

CSV / TSV 的逐字符引号感知切分，以及按表头构建记录。
"""

from __future__ import annotations

from typing import List

from lingovault.extract.base import LINE_SPLIT_RE, Record, build_positional_record, column_key
from lingovault.logger import get_logger

logger = get_logger(__name__)

QUOTE = '"'


def parse_delimited_line(text: str, delimiter: str) -> List[str]:
    """
    引号感知的单行切分。

    - 双引号切换引用状态；引用内的 "" 表示一个字面引号
    - 引用外遇到分隔符（支持多字符）结束当前字段
    - 引号不配对时，剩余内容全部归入最后一个字段
    """
    result: List[str] = []
    current: List[str] = []
    in_quote = False
    delimiter_length = len(delimiter)
    i = 0
    length = len(text)

    while i < length:
        char = text[i]

        if char == QUOTE:
            if in_quote and i + 1 < length and text[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 2
                continue
            in_quote = not in_quote
            i += 1
            continue

        if not in_quote and delimiter_length > 0 and text.startswith(delimiter, i):
            result.append("".join(current))
            current = []
            i += delimiter_length
            continue

        current.append(char)
        i += 1

    result.append("".join(current))
    return result


def split_nonblank_lines(raw_data: str) -> List[str]:
    lines = (line.rstrip() for line in LINE_SPLIT_RE.split(raw_data or ""))
    return [line for line in lines if line.strip()]


def build_delimited_records(
    raw_data: str,
    delimiter: str,
    has_header: bool = True,
    skip_rows: int = 0,
) -> List[Record]:
    """
    把分隔文本转为记录列表。

    表头取第 skip_rows 行（越界时取最后一行）；无表头时按该行字段数生成
    column1..columnN，数据从 skip_rows 行开始。每条记录同时以表头名、
    columnN 与数字下标为键，原始切分结果保存在 __parts。
    """
    lines = split_nonblank_lines(raw_data)
    if not lines:
        return []

    effective_delimiter = delimiter or ","
    skip_rows = max(0, int(skip_rows or 0))
    header_index = min(skip_rows, len(lines) - 1)

    first = parse_delimited_line(lines[header_index], effective_delimiter)
    if has_header:
        headers = [header.strip() for header in first]
        data_start = header_index + 1
    else:
        headers = [column_key(idx) for idx in range(len(first))]
        data_start = skip_rows

    records: List[Record] = []
    for line in lines[data_start:]:
        cols = parse_delimited_line(line, effective_delimiter)
        if len(cols) != len(headers):
            logger.debug("Row has %d fields, header has %d: %r", len(cols), len(headers), line[:80])
        records.append(build_positional_record(cols, cols, headers))

    logger.info(
        "Delimited extraction: %d records (delimiter=%r, header=%s, skip_rows=%d)",
        len(records),
        effective_delimiter,
        has_header,
        skip_rows,
    )
    return records
