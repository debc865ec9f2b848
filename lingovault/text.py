"""
Script-aware string helpers shared by extraction and repair.

CJK detection covers the CJK Unified Ideographs block (U+4E00..U+9FFF),
which is what pasted Chinese glosses use in practice.
"""

from __future__ import annotations

import re
from typing import List

CJK_START = "\u4e00"
CJK_END = "\u9fff"

CJK_RE = re.compile(r"[\u4e00-\u9fff]")
TRAILING_FULL_STOP_RE = re.compile(r"[。．.]+$")
LEADING_SEPARATOR_RE = re.compile(r"^[\s:：.]+")
TAG_SEPARATOR_RE = re.compile(r"[/;,，、\s]+")


def is_cjk_character(ch: str) -> bool:
    return len(ch) == 1 and CJK_START <= ch <= CJK_END


def contains_cjk(value: str) -> bool:
    return bool(value) and CJK_RE.search(value) is not None


def first_cjk_index(value: str) -> int:
    """Index of the first CJK ideograph in *value*, or -1."""
    match = CJK_RE.search(value or "")
    return match.start() if match else -1


def strip_trailing_punctuation(value: str) -> str:
    """Trim, then drop trailing full stops (``.``, ``。``, ``．``)."""
    return TRAILING_FULL_STOP_RE.sub("", (value or "").strip()).strip()


def strip_leading_separators(value: str) -> str:
    """Drop leading whitespace, colons and periods (``run: 跑`` -> ``跑``)."""
    return LEADING_SEPARATOR_RE.sub("", value or "").strip()


def split_at_first_cjk(value: str):
    """
    Split *value* into ``(prefix, remainder)`` at its first CJK ideograph.

    Returns ``(value, None)`` when there is no CJK text.
    """
    idx = first_cjk_index(value)
    if idx < 0:
        return value, None
    return value[:idx], value[idx:]


def split_tag_segment(segment: str) -> List[str]:
    """Split a tag run such as ``n./v., adj`` into ``["n", "v", "adj"]``."""
    cleaned = strip_trailing_punctuation(segment)
    if not cleaned:
        return []
    tags = [strip_trailing_punctuation(part) for part in TAG_SEPARATOR_RE.split(cleaned)]
    return [tag for tag in tags if tag]
