"""
启发式修复 (Heuristic Repair)
============================

计划经常漏映射或映射错中文释义、标签。对每条记录按固定顺序执行:

1. 标签字段拆分: tags 原文里出现中文时，中文之前是标签，中文起是释义候选；
   chinese 为空时采用该释义。
2. 释义位置回退: chinese 仍为空或不含中文时，取原始切分中第一个含中文、
   非空且不等于 english 的片段。原有的非中文 chinese 值降级为标签。
3. 标签位置回退: 仍无标签且原始片段多于一个时，收集所有非中文、非空、
   不等于 english 的片段（保序去重）。

任何一步条件不满足就跳过，不会因单条记录中止整批导入。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from lingovault.extract.base import Record, raw_parts
from lingovault.mapping.resolver import ResolvedFields
from lingovault.text import contains_cjk, split_at_first_cjk, split_tag_segment, strip_leading_separators


@dataclass(frozen=True)
class RepairedFields:
    english: str
    chinese: str
    example: str
    tags: Optional[List[str]]


def extract_tags_and_meaning(raw: Optional[str]) -> Tuple[Optional[List[str]], Optional[str]]:
    """
    把 ``"n./v. 跑步"`` 这样的标签原文拆成 ``(["n", "v"], "跑步")``。

    没有标签时返回 None 而不是空列表，与“未提供标签”区分开。
    """
    normalized = (raw or "").strip()
    if not normalized:
        return None, None

    tag_segment, meaning_segment = split_at_first_cjk(normalized)
    meaning = strip_leading_separators(meaning_segment) if meaning_segment is not None else ""
    tags = split_tag_segment(tag_segment)
    return (tags or None), (meaning or None)


class _TagList:
    """保序去重的标签累加器。"""

    def __init__(self, initial: Optional[List[str]]):
        self.items: Optional[List[str]] = None
        for tag in initial or ():
            self.add(tag)

    def add(self, candidate: Optional[str]) -> None:
        tag = (candidate or "").strip()
        if not tag:
            return
        if self.items is None:
            self.items = []
        if tag not in self.items:
            self.items.append(tag)

    def __bool__(self) -> bool:
        return bool(self.items)


class HeuristicRepair:
    """无状态；repair 对同样的输入总是给出同样的结果。"""

    @staticmethod
    def repair(resolved: ResolvedFields, record: Record) -> RepairedFields:
        english = resolved.english
        chinese = resolved.chinese

        tags_from_field, meaning = extract_tags_and_meaning(resolved.tags_raw)
        tags = _TagList(tags_from_field)

        # 1. meaning carried inside the tags field
        if meaning and not chinese:
            chinese = meaning

        parts = raw_parts(record)

        # 2. first CJK token that is not the headword
        if not chinese or not contains_cjk(chinese):
            fallback = HeuristicRepair._first_meaning_token(parts, english)
            if fallback is not None:
                if chinese and not contains_cjk(chinese):
                    tags.add(chinese)
                chinese = fallback.strip()

        # 3. leftover non-CJK tokens become tags
        if not tags and len(parts) > 1:
            for part in parts:
                if (
                    isinstance(part, str)
                    and not contains_cjk(part)
                    and part.strip()
                    and part.strip() != english
                ):
                    tags.add(part)

        return RepairedFields(
            english=english,
            chinese=chinese,
            example=resolved.example,
            tags=tags.items,
        )

    @staticmethod
    def _first_meaning_token(parts: List[object], english: str) -> Optional[str]:
        for part in parts:
            if (
                isinstance(part, str)
                and contains_cjk(part)
                and part.strip()
                and part.strip() != english
            ):
                return part
        return None
