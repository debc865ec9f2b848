"""
后端处理模块 (Backend Process Module)
====================================

封装智能导入流程：请求计划（或使用给定计划）→ 提取 → 合并进词库 → 输出 JSON。
CLI 与 API 共用此模块。
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from lingovault.logger import get_logger
from lingovault.pipeline import ImportOutcome, run_smart_import
from lingovault.plan.requester import PlanRequester
from lingovault.prompts_loader import get_prompts
from lingovault.store import VocabularyStore

logger = get_logger(__name__)

DEFAULT_VOCABULARY_NAME = "vocabulary.json"


def resolve_vocabulary_path(vocabulary_path: Optional[str] = None) -> Path:
    """
    解析词库文件路径。
    优先使用参数，其次 VOCABULARY_PATH 环境变量，最后为当前目录下的 vocabulary.json。
    """
    configured = (vocabulary_path or os.getenv("VOCABULARY_PATH", "")).strip()
    return Path(configured or DEFAULT_VOCABULARY_NAME).expanduser().resolve()


def load_plan_file(plan_path: str) -> Dict[str, Any]:
    """读取手写的计划 JSON 文件，跳过 LLM 调用时使用。"""
    with open(Path(plan_path).expanduser(), "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Plan file {plan_path} must contain a JSON object")
    return data


def build_requester(retry: bool = True) -> PlanRequester:
    return PlanRequester(None, get_prompts(), retry=retry)


def process_import(
    raw_text: str,
    store: VocabularyStore,
    plan_override: Optional[Dict[str, Any]] = None,
    source_label: Optional[str] = None,
    retry: bool = True,
) -> Dict[str, Any]:
    """
    执行一次智能导入并返回可序列化的结果。

    参数:
        raw_text: 用户粘贴的原始内容
        store: 词库（唯一写入路径）
        plan_override: 给定计划时不调用 LLM
        source_label: 批次标签，缺省为 import-YYMMDD-HHMM
        retry: 请求计划时是否启用重试
    """
    requester = None if plan_override is not None else build_requester(retry=retry)
    outcome: ImportOutcome = run_smart_import(
        raw_text,
        store,
        requester=requester,
        plan=plan_override,
        source_label=source_label,
    )
    result = outcome.to_dict()
    result["total_words"] = len(store)
    logger.info("process_import: status=%s inserted=%d", outcome.status, outcome.inserted)
    return result


def _resolve_output_json_name(output_filename: Optional[str] = None) -> str:
    if output_filename and output_filename.strip():
        return output_filename.strip()
    env_output_name = os.getenv("OUTPUT_JSON_NAME", "").strip()
    if env_output_name:
        return env_output_name
    if os.getenv("OUTPUT_JSON_TIMESTAMP", "").strip().lower() in {"1", "true", "yes", "on"}:
        return f"import_result_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
    return "import_result.json"


def write_json_output(
    result: Dict[str, Any],
    output_dir: str,
    output_filename: Optional[str] = None,
) -> str:
    """
    将结果写入 JSON 文件到 output_dir。
    文件名可由 output_filename 或 OUTPUT_JSON_NAME 环境变量指定。
    """
    output_path = Path(output_dir).resolve()
    output_path.mkdir(parents=True, exist_ok=True)
    json_path = output_path / _resolve_output_json_name(output_filename)
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(result, f, ensure_ascii=False, indent=2, default=str)
    return str(json_path)
