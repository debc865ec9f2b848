"""
中间表示模块 (Intermediate Representation Module)
================================================

定义智能导入流程中的核心数据结构：ImportPlan（按格式区分的计划变体）、
FieldMap 以及最终产物 WordItem。

序列化使用驼峰别名（fieldMap、hasHeader、isMastered、createdAt），
与客户端保存的词库文件和模型返回的计划结构保持一致。
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lingovault.plan.path import PathExpression, parse_path

LOGICAL_FIELDS = ("english", "chinese", "example", "tags")


class ImportFormat(str, Enum):
    """计划格式的封闭集合，未知取值由规范化器回落为 CSV。"""
    CSV = "csv"
    TSV = "tsv"
    JSON = "json"
    TEXT = "text"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldMap(_CamelModel):
    """
    逻辑字段 → 路径/列表达式。

    english 规范化后必定非空（缺省回落到 column1），其余字段未解析时为空串。
    """
    english: str = "column1"
    chinese: str = ""
    example: str = ""
    tags: str = ""

    def expressions(self) -> Dict[str, PathExpression]:
        """每个逻辑字段预先解析好的路径表达式，每个计划只解析一次。"""
        return {name: parse_path(getattr(self, name)) for name in LOGICAL_FIELDS}


class _PlanBase(_CamelModel):
    field_map: FieldMap = Field(default_factory=FieldMap)
    notes: Optional[str] = None
    confidence: Optional[float] = None

    def to_dict(self) -> dict:
        """计划的线上形态（驼峰键），用于展示与日志。"""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class _DelimitedPlan(_PlanBase):
    has_header: bool = True
    skip_rows: int = Field(default=0, ge=0)


class CsvPlan(_DelimitedPlan):
    format: Literal["csv"] = "csv"
    delimiter: str = ","


class TsvPlan(_DelimitedPlan):
    format: Literal["tsv"] = "tsv"
    delimiter: str = "\t"


class TextPlan(_PlanBase):
    """自由文本：逐行按分隔符切分，并对含中文的片段做自动拆分。"""
    format: Literal["text"] = "text"
    delimiter: str = "\t"


class JsonPlan(_PlanBase):
    format: Literal["json"] = "json"
    record_path: Optional[str] = None


ImportPlan = Annotated[
    Union[CsvPlan, TsvPlan, TextPlan, JsonPlan],
    Field(discriminator="format"),
]

PLAN_TYPES = {
    ImportFormat.CSV: CsvPlan,
    ImportFormat.TSV: TsvPlan,
    ImportFormat.TEXT: TextPlan,
    ImportFormat.JSON: JsonPlan,
}


class WordItem(_CamelModel):
    """
    词条模型，智能导入的最终产物。

    属性:
        id: 唯一标识
        english: 英文词（去重键，去空白后非空）
        chinese: 中文释义
        example: 例句（可选）
        tags: 标签（有序、去重，可选）
        is_mastered: 是否已掌握（0/1）
        created_at: 创建时间（毫秒时间戳，批内按行号递增）
        source: 导入批次标签
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    english: str
    chinese: str = ""
    example: Optional[str] = None
    tags: Optional[List[str]] = None
    is_mastered: int = 0
    created_at: int = 0
    source: Optional[str] = None

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
