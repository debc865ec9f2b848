"""
词库存储 (Vocabulary Store)
==========================

词库的唯一写入路径。import_words 在同一把锁内完成 读取 → 合并 → 写回，
多个导入并发执行时按顺序串行，不会出现两个批次读到同一份旧快照、
后写覆盖先写而丢词的情况。

文件格式与客户端导出的 ``{"words": [...], "version": "..."}`` 一致，
加载时也接受裸列表。
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from lingovault import __version__
from lingovault.ir import WordItem
from lingovault.logger import get_logger
from lingovault.merge import WordLike, merge_imported

logger = get_logger(__name__)

DEFAULT_SOURCE = "user"


def normalize_word_item(word: Any, default_source: str = DEFAULT_SOURCE) -> Optional[WordItem]:
    """
    把旧版或外部来源的词条补全为 WordItem。

    缺 id 时生成新 id，缺 createdAt / isMastered 时补默认值，
    source 缺失或为空白时使用 default_source。english 为空的条目返回 None。
    """
    if not isinstance(word, dict):
        return None
    english = word.get("english")
    if not isinstance(english, str) or not english.strip():
        return None

    data = {
        "english": english,
        "chinese": word.get("chinese") if isinstance(word.get("chinese"), str) else "",
        "example": word.get("example") if isinstance(word.get("example"), str) else None,
        "tags": [t for t in word["tags"] if isinstance(t, str)] if isinstance(word.get("tags"), list) else None,
    }
    if isinstance(word.get("id"), str) and word["id"]:
        data["id"] = word["id"]
    mastered = word.get("isMastered", word.get("is_mastered"))
    data["is_mastered"] = int(mastered) if isinstance(mastered, (int, float)) else 0
    created = word.get("createdAt", word.get("created_at"))
    data["created_at"] = int(created) if isinstance(created, (int, float)) else int(time.time() * 1000)
    source = word.get("source")
    data["source"] = source if isinstance(source, str) and source.strip() else default_source
    return WordItem(**data)


class VocabularyStore:
    """
    基于 JSON 文件的词库。

    参数:
        path: 词库文件路径；为 None 时只保存在内存中（测试、dry-run 使用）
        words: 初始词条（仅在 path 为 None 或文件不存在时使用）
    """

    def __init__(self, path: Optional[Union[str, Path]] = None, words: Optional[Iterable[WordLike]] = None):
        self.path = Path(path).expanduser() if path else None
        self._lock = threading.Lock()
        self._words: List[WordItem] = []
        if self.path is not None and self.path.exists():
            self._words = self._load(self.path)
        elif words:
            self._words = [w for w in (normalize_word_item(self._as_dict(x)) for x in words) if w]

    # -- public API ----------------------------------------------------------

    def words(self) -> List[WordItem]:
        """当前词库快照（浅拷贝列表）。"""
        with self._lock:
            return list(self._words)

    def __len__(self) -> int:
        with self._lock:
            return len(self._words)

    def import_words(self, candidates: Iterable[WordLike]) -> int:
        """合并一批候选词条并持久化，返回新增数量。"""
        candidates = list(candidates)
        if not candidates:
            return 0
        with self._lock:
            result = merge_imported(self._words, candidates)
            if result.inserted:
                if self.path is not None:
                    self._write(self.path, result.words)
                self._words = result.words
            return result.inserted

    # -- persistence ---------------------------------------------------------

    @staticmethod
    def _as_dict(item: WordLike) -> dict:
        return item.to_dict() if isinstance(item, WordItem) else item

    @staticmethod
    def _load(path: Path) -> List[WordItem]:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        raw_words = data.get("words", []) if isinstance(data, dict) else data
        if not isinstance(raw_words, list):
            raise ValueError(f"Vocabulary file {path} has no word list")

        words = []
        skipped = 0
        for raw in raw_words:
            word = normalize_word_item(raw)
            if word is None:
                skipped += 1
                continue
            words.append(word)
        if skipped:
            logger.warning("Skipped %d unusable entries while loading %s", skipped, path)
        logger.info("Loaded %d words from %s", len(words), path)
        return words

    @staticmethod
    def _write(path: Path, words: List[WordItem]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"words": [w.to_dict() for w in words], "version": __version__}
        fd, tmp_path = tempfile.mkstemp(prefix=".vocab_", suffix=".json", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug("Wrote %d words to %s", len(words), path)
