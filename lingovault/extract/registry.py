"""
提取器注册表模块 (Extractor Registry Module)
==========================================

将计划格式映射到对应的记录提取处理器。流水线只需调用 extract，
无需知道具体使用哪种切分策略。
"""

from __future__ import annotations

from typing import Callable, Dict, List, Union

from lingovault.extract.base import Record
from lingovault.extract.delimited import build_delimited_records
from lingovault.extract.json_records import parse_json_records
from lingovault.extract.text_records import build_text_records
from lingovault.ir import CsvPlan, ImportFormat, ImportPlan, JsonPlan, TextPlan, TsvPlan
from lingovault.logger import get_logger

logger = get_logger(__name__)

# Signature: (raw_data, plan) -> records
ExtractHandler = Callable[[str, ImportPlan], List[Record]]


class ExtractorRegistry:
    """
    提取器注册表：format → 处理器。

    构造时注册内置处理器；调用方可通过 register 覆盖或扩展。
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, ExtractHandler] = {}
        self._register_defaults()

    # -- public API ----------------------------------------------------------

    def register(self, fmt: Union[ImportFormat, str], handler: ExtractHandler) -> None:
        """注册或覆盖指定格式的处理器。"""
        self._handlers[ImportFormat(fmt).value] = handler

    def extract(self, raw_data: str, plan: ImportPlan) -> List[Record]:
        handler = self._handlers.get(plan.format)
        if handler is None:
            logger.warning("No extractor for format=%s", plan.format)
            return []
        return handler(raw_data, plan)

    # -- defaults ------------------------------------------------------------

    def _register_defaults(self) -> None:
        self.register(ImportFormat.CSV, self._extract_delimited)
        self.register(ImportFormat.TSV, self._extract_delimited)
        self.register(ImportFormat.TEXT, self._extract_text)
        self.register(ImportFormat.JSON, self._extract_json)

    @staticmethod
    def _extract_delimited(raw_data: str, plan: Union[CsvPlan, TsvPlan]) -> List[Record]:
        return build_delimited_records(raw_data, plan.delimiter, plan.has_header, plan.skip_rows)

    @staticmethod
    def _extract_text(raw_data: str, plan: TextPlan) -> List[Record]:
        return build_text_records(raw_data, plan.delimiter or "\t")

    @staticmethod
    def _extract_json(raw_data: str, plan: JsonPlan) -> List[Record]:
        return parse_json_records(raw_data, plan.record_path)


_default_registry = ExtractorRegistry()


def extract_records(raw_data: str, plan: ImportPlan) -> List[Record]:
    """使用默认注册表提取记录。"""
    return _default_registry.extract(raw_data, plan)
