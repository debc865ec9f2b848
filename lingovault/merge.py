"""
去重合并 (Dedup Merger)
======================

把一批新词条并入已有词库:
- 去重键为 english 去空白后转小写
- 键为空、键已存在、或 id 已存在的候选被跳过（不报错，只计入总数之外）
- 同一批内键重复时只保留第一条
- 新词条按提取顺序整体置于已有词条之前，已有词条及其顺序不变

- 无法校验为 WordItem 的字典条目（例如缺 english）被跳过并记录警告

merge 是输入的纯函数，不修改传入的列表或词条，也不会抛异常。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Union

from pydantic import ValidationError

from lingovault.ir import WordItem
from lingovault.logger import get_logger

logger = get_logger(__name__)

WordLike = Union[WordItem, dict]


@dataclass(frozen=True)
class MergeResult:
    words: List[WordItem]
    inserted: int

    def __iter__(self):
        # allows ``words, inserted = merge_imported(...)``
        return iter((self.words, self.inserted))


def dedup_key(english: Any) -> str:
    return english.strip().lower() if isinstance(english, str) else ""


def as_word_item(item: WordLike) -> Optional[WordItem]:
    """WordItem 原样返回；字典校验为 WordItem，无法校验（如缺 english）时返回 None。"""
    if isinstance(item, WordItem):
        return item
    try:
        return WordItem.model_validate(item)
    except ValidationError as exc:
        logger.warning("Merge: skipping unusable entry (%d validation errors)", exc.error_count())
        return None


class DedupMerger:

    @staticmethod
    def merge(existing: Iterable[WordLike], candidates: Iterable[WordLike]) -> MergeResult:
        current = [word for word in map(as_word_item, existing) if word is not None]
        seen_keys = {dedup_key(item.english) for item in current}
        seen_ids = {item.id for item in current}

        novel: List[WordItem] = []
        skipped = 0
        for candidate in candidates:
            word = as_word_item(candidate)
            key = dedup_key(word.english) if word is not None else ""
            if not key or key in seen_keys or word.id in seen_ids:
                skipped += 1
                continue
            seen_keys.add(key)
            seen_ids.add(word.id)
            novel.append(word)

        logger.info("Merge: %d inserted, %d skipped, %d existing", len(novel), skipped, len(current))
        if not novel:
            return MergeResult(words=current, inserted=0)
        return MergeResult(words=novel + current, inserted=len(novel))


def merge_imported(existing: Iterable[WordLike], candidates: Iterable[WordLike]) -> MergeResult:
    return DedupMerger.merge(existing, candidates)
