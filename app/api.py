"""
API 模块 (API Module)
====================

FastAPI 后端：POST /import 执行智能导入，GET /words 返回当前词库。
所有请求共享同一个 VocabularyStore，写入经由它的单一写路径串行化。
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from app.backend.process import process_import, resolve_vocabulary_path
from lingovault.store import VocabularyStore

app = FastAPI(title="LingoVault Smart Import")

_store: Optional[VocabularyStore] = None


def get_store() -> VocabularyStore:
    """懒加载共享词库，路径由 VOCABULARY_PATH 决定。"""
    global _store
    if _store is None:
        _store = VocabularyStore(resolve_vocabulary_path())
    return _store


def set_store(store: Optional[VocabularyStore]) -> None:
    global _store
    _store = store


class ImportRequest(BaseModel):
    text: str
    plan: Optional[Dict[str, Any]] = None
    source: Optional[str] = None


@app.get("/words")
def list_words():
    """返回词库中的全部词条（新导入的在前）。"""
    return {"words": [w.to_dict() for w in get_store().words()]}


@app.post("/import")
def import_endpoint(body: ImportRequest):
    """
    智能导入接口。
    计划获取失败返回 502；没有新词时返回 200 且 inserted 为 0。
    """
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="text must not be empty")

    result = process_import(
        body.text,
        get_store(),
        plan_override=body.plan,
        source_label=body.source,
    )
    if result["status"] == "failed":
        raise HTTPException(status_code=502, detail=result.get("error") or "import plan unavailable")
    return result
