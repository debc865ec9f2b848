"""
Extract layer: raw pasted text + normalized plan -> flat records.
"""

from lingovault.extract.base import LINE_KEY, RAW_PARTS_KEY, Record
from lingovault.extract.delimited import build_delimited_records, parse_delimited_line
from lingovault.extract.json_records import parse_json_lines, parse_json_records
from lingovault.extract.registry import ExtractorRegistry, extract_records
from lingovault.extract.text_records import build_text_records, expand_cjk_segment

__all__ = [
    "LINE_KEY",
    "RAW_PARTS_KEY",
    "Record",
    "ExtractorRegistry",
    "extract_records",
    "build_delimited_records",
    "parse_delimited_line",
    "parse_json_lines",
    "parse_json_records",
    "build_text_records",
    "expand_cjk_segment",
]
