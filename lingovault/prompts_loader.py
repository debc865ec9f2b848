"""
提示词加载模块 (Prompts Loader Module)
=====================================

提示词保存在 Markdown 文件中，每个 ``## 标题`` 下的正文是一段提示词。
默认读取项目根目录的 prompt.md，可用 PROMPT_FILE 环境变量改为其它文件
（相对路径相对项目根目录解析）。
"""

import os
import re
from pathlib import Path
from typing import Dict, Optional

PROMPT_KEYS = (
    "SMART_IMPORT_SYSTEM_PROMPT",
    "SMART_IMPORT_PLAN_PROMPT",
)

PROJECT_ROOT = Path(__file__).resolve().parent.parent

_SECTION_RE = re.compile(r"^##\s+", re.MULTILINE)

_prompts_cache: Optional[Dict[str, str]] = None


def prompt_file_path() -> Path:
    configured = os.getenv("PROMPT_FILE", "").strip()
    if not configured:
        return PROJECT_ROOT / "prompt.md"
    path = Path(configured).expanduser()
    return path if path.is_absolute() else (PROJECT_ROOT / path).resolve()


def parse_prompt_sections(content: str) -> Dict[str, str]:
    """按 ``## 标题`` 切分，返回 {标题: 正文}；没有正文的标题被忽略。"""
    sections: Dict[str, str] = {}
    for chunk in _SECTION_RE.split(content)[1:]:
        title, sep, body = chunk.partition("\n")
        if sep:
            sections[title.strip()] = body.strip()
    return sections


def load_prompts(path: Path) -> Dict[str, str]:
    if not path.exists():
        expected = "\n".join(f"- ## {key}" for key in PROMPT_KEYS)
        raise FileNotFoundError(
            f"Prompt file not found: {path}\n"
            f"Create it (or point PROMPT_FILE at one) with these sections:\n{expected}"
        )
    sections = parse_prompt_sections(path.read_text(encoding="utf-8"))
    return {key: sections.get(key, "") for key in PROMPT_KEYS}


def get_prompts() -> Dict[str, str]:
    """读取并缓存提示词；缺失的段落返回空串。"""
    global _prompts_cache
    if _prompts_cache is None:
        _prompts_cache = load_prompts(prompt_file_path())
    return _prompts_cache


def reset_prompts_cache() -> None:
    global _prompts_cache
    _prompts_cache = None
