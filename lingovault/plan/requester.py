"""
计划请求 (Plan Requester)
========================

把粘贴内容的前几行作为样本发送给 LLM，取回导入计划并规范化。

这是整个导入流程中唯一的外部调用。任何失败都会中止本次导入，
调用方在拿到计划之前不会触碰词库，因此不存在部分写入。
"""

from __future__ import annotations

import os
import re
from typing import Any, Optional

from lingovault.errors import PlanMalformed, PlanRequestFailure
from lingovault.ir import ImportPlan
from lingovault.llm import JSONParser, LLMClient, get_llm_client
from lingovault.logger import get_logger
from lingovault.plan.normalizer import PlanNormalizer

logger = get_logger(__name__)

STEP_NAME = "smart_import_plan"
SAMPLE_PLACEHOLDER = "{sample}"


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)).strip())
    except Exception:
        return default


DEFAULT_SAMPLE_LINES = _env_int("IMPORT_SAMPLE_LINES", 5)

_LINE_SPLIT_RE = re.compile(r"\r?\n")


def build_sample(raw_input: str, max_lines: int = DEFAULT_SAMPLE_LINES) -> str:
    """取去除首尾空白后的前 max_lines 行作为样本。"""
    lines = _LINE_SPLIT_RE.split((raw_input or "").strip())
    return "\n".join(lines[: max(1, max_lines)])


class PlanRequester:
    """
    计划请求器。

    参数:
        llm: LLMClient（或任何提供 chat_json / chat_json_once 的对象）；
            为 None 时在请求时取共享客户端，配置错误因此也按请求失败处理
        prompts: 含 SMART_IMPORT_SYSTEM_PROMPT、SMART_IMPORT_PLAN_PROMPT 的提示词字典
        normalizer: 计划规范化器，默认使用内置同义键表
        retry: True 时走带重试的 chat_json，False 时单次调用快速失败
    """

    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        prompts: Optional[dict] = None,
        normalizer: Optional[PlanNormalizer] = None,
        retry: bool = True,
    ):
        self.llm = llm
        self.prompts = prompts or {}
        self.normalizer = normalizer or PlanNormalizer()
        self.retry = retry

    def build_prompt(self, sample: str) -> str:
        template = self.prompts.get("SMART_IMPORT_PLAN_PROMPT") or SAMPLE_PLACEHOLDER
        if SAMPLE_PLACEHOLDER not in template:
            return f"{template}\n\n{sample}"
        return template.replace(SAMPLE_PLACEHOLDER, sample)

    def request_plan(self, sample: str) -> ImportPlan:
        """
        请求并规范化计划。

        抛出:
            PlanRequestFailure: LLM 调用本身失败（网络、鉴权、服务端错误、缺少 API 密钥等）
            PlanMalformed: 返回内容无法解析为 JSON 对象
        """
        prompt = self.build_prompt(sample)
        system = self.prompts.get("SMART_IMPORT_SYSTEM_PROMPT") or None
        logger.info("Requesting import plan | sample_chars=%d | retry=%s", len(sample), self.retry)

        try:
            llm = self.llm if self.llm is not None else get_llm_client()
            call = llm.chat_json if self.retry else llm.chat_json_once
            raw: Any = call(prompt, system=system, step=STEP_NAME)
        except Exception as exc:
            logger.error("Import plan request failed: %s", exc)
            raise PlanRequestFailure(f"Import plan request failed: {exc}") from exc

        if JSONParser.is_error(raw):
            logger.error("Import plan is not valid JSON: %s", raw.get("parse_error"))
            raise PlanMalformed("Import plan is not valid JSON", raw_output=raw.get("raw_output", ""))
        if not isinstance(raw, dict):
            logger.error("Import plan is a %s, expected an object", type(raw).__name__)
            raise PlanMalformed(f"Import plan is a {type(raw).__name__}, expected an object")

        plan = self.normalizer.normalize(raw)
        logger.info(
            "Import plan ready | format=%s | english=%s | confidence=%s",
            plan.format,
            plan.field_map.english,
            plan.confidence,
        )
        return plan
