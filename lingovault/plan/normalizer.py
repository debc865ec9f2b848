"""
计划规范化 (Plan Normalizer)
===========================

把模型返回的、不可信的计划对象整理成合法的 ImportPlan。

规则:
- format 小写后必须属于 {csv, tsv, json, text}，否则回落 csv
- delimiter 缺省时按格式取默认值（csv 为逗号，tsv/text 为制表符）
- hasHeader / skipRows 类型正确才采用；skipRows 向下取整并钳制到 >= 0
- fieldMap 逐字段按同义键查找，取第一个非空字符串；english 最终回落到 column1

normalize 永不抛异常：完全缺失或无法识别的输入得到最保守的 CSV 计划。
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional, Sequence

from lingovault.errors import PlanMalformed
from lingovault.ir import FieldMap, ImportFormat, ImportPlan, PLAN_TYPES
from lingovault.llm import JSONParser
from lingovault.logger import get_logger

logger = get_logger(__name__)

DEFAULT_DELIMITERS: Dict[ImportFormat, str] = {
    ImportFormat.CSV: ",",
    ImportFormat.TSV: "\t",
    ImportFormat.TEXT: "\t",
}

# Spellings models use for a tab when they cannot emit a raw tab character.
DELIMITER_ALIASES: Dict[str, str] = {
    "\\t": "\t",
    "tab": "\t",
}

FIELD_SYNONYMS: Dict[str, Sequence[str]] = {
    "english": ("english", "English", "word", "Word", "column1", "Column1"),
    "chinese": ("chinese", "Chinese", "meaning", "translation", "column2", "Column2"),
    "example": ("example", "Example", "sentence", "Sentence", "column3", "Column3"),
    "tags": ("tags", "Tags", "category", "Category"),
}

DEFAULT_ENGLISH_PATH = "column1"


def coerce_field(value: Any) -> Optional[str]:
    """非空字符串去空白后返回，其余一律视为缺失。"""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def pick_first(mapping: Dict[str, Any], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        coerced = coerce_field(mapping.get(key))
        if coerced:
            return coerced
    return None


def _first_present(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


class PlanNormalizer:
    """
    无状态的计划规范化器。

    同义键表可在构造时替换，便于接入其它字段命名习惯。
    """

    def __init__(self, field_synonyms: Optional[Dict[str, Sequence[str]]] = None):
        self._field_synonyms = dict(field_synonyms or FIELD_SYNONYMS)

    # -- public API ----------------------------------------------------------

    def normalize(self, raw: Any) -> ImportPlan:
        if not isinstance(raw, dict):
            logger.warning("Plan is %s, not an object; using default CSV plan", type(raw).__name__)
            raw = {}

        fmt = self.normalize_format(raw.get("format"))
        common = {
            "field_map": self.normalize_field_map(_first_present(raw, "fieldMap", "field_map")),
            "notes": coerce_field(raw.get("notes")),
            "confidence": self._finite_number(raw.get("confidence")),
        }

        plan_cls = PLAN_TYPES[fmt]
        if fmt is ImportFormat.JSON:
            plan = plan_cls(
                record_path=coerce_field(_first_present(raw, "recordPath", "record_path")),
                **common,
            )
        elif fmt is ImportFormat.TEXT:
            plan = plan_cls(delimiter=self.normalize_delimiter(raw.get("delimiter"), fmt), **common)
        else:
            has_header = _first_present(raw, "hasHeader", "has_header")
            plan = plan_cls(
                delimiter=self.normalize_delimiter(raw.get("delimiter"), fmt),
                has_header=has_header if isinstance(has_header, bool) else True,
                skip_rows=self.normalize_skip_rows(_first_present(raw, "skipRows", "skip_rows")),
                **common,
            )

        logger.debug("Normalized plan: %s", plan.to_dict())
        return plan

    @staticmethod
    def normalize_format(value: Any) -> ImportFormat:
        if isinstance(value, str):
            try:
                return ImportFormat(value.strip().lower())
            except ValueError:
                logger.info("Unknown plan format %r; falling back to csv", value)
        return ImportFormat.CSV

    @staticmethod
    def normalize_delimiter(value: Any, fmt: ImportFormat) -> str:
        """
        非空字符串原样保留（纯空白的分隔符如制表符不能被去掉），
        转义写法 "\\t" / "tab" 还原为真实字符，其余情况取格式默认值。
        """
        if isinstance(value, str) and value:
            alias = DELIMITER_ALIASES.get(value.strip().lower())
            if alias:
                return alias
            if value.strip():
                return value.strip()
            return value
        return DEFAULT_DELIMITERS.get(fmt, ",")

    @staticmethod
    def normalize_skip_rows(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return max(0, math.floor(value))

    def normalize_field_map(self, raw_field_map: Any) -> FieldMap:
        if not isinstance(raw_field_map, dict):
            return FieldMap(english=DEFAULT_ENGLISH_PATH)
        resolved = {
            name: pick_first(raw_field_map, synonyms) or ""
            for name, synonyms in self._field_synonyms.items()
        }
        if not resolved.get("english"):
            resolved["english"] = DEFAULT_ENGLISH_PATH
        return FieldMap(**resolved)

    # -- internals -----------------------------------------------------------

    @staticmethod
    def _finite_number(value: Any) -> Optional[float]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value) if math.isfinite(value) else None


_default_normalizer = PlanNormalizer()


def normalize_plan(raw: Any) -> ImportPlan:
    """模块级便捷入口，等价于 PlanNormalizer().normalize(raw)。"""
    return _default_normalizer.normalize(raw)


def parse_plan_text(text: str) -> ImportPlan:
    """
    解析模型的原始文本输出并规范化。

    这是规范化阶段唯一会失败的情形：文本中找不到任何可解析的 JSON 对象时抛出
    PlanMalformed；能解析但字段残缺的计划一律宽松修复。
    """
    parsed = JSONParser.parse(text)
    if JSONParser.is_error(parsed) or not isinstance(parsed, dict):
        raise PlanMalformed("Import plan is not a JSON object", raw_output=(text or "")[:5000])
    return normalize_plan(parsed)
