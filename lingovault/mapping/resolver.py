"""
字段解析 (Field Resolver)
========================

按计划的 fieldMap 从每条记录取出 english / chinese / example / tags 的原始值。
只负责取值，不做任何修复。
"""

from __future__ import annotations

from dataclasses import dataclass

from lingovault.extract.base import Record
from lingovault.ir import FieldMap, ImportPlan
from lingovault.plan.path import resolve


@dataclass(frozen=True)
class ResolvedFields:
    """
    解析结果。english/chinese/example 已去首尾空白；
    tags_raw 保留原样，交给标签切分逻辑处理。
    """
    english: str = ""
    chinese: str = ""
    example: str = ""
    tags_raw: str = ""


class FieldResolver:
    """每个计划构造一次，路径表达式只解析一次后对所有记录复用。"""

    def __init__(self, field_map: FieldMap):
        self._expressions = field_map.expressions()

    @classmethod
    def for_plan(cls, plan: ImportPlan) -> "FieldResolver":
        return cls(plan.field_map)

    def resolve(self, record: Record) -> ResolvedFields:
        exprs = self._expressions
        return ResolvedFields(
            english=resolve(record, exprs["english"]).strip(),
            chinese=resolve(record, exprs["chinese"]).strip(),
            example=resolve(record, exprs["example"]).strip(),
            tags_raw=resolve(record, exprs["tags"]),
        )
