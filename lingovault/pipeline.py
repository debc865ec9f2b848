"""
Pipeline: thin orchestrator for the smart import flow.

apply_plan       – raw text + plan → List[WordItem]           (pure, sync)
merge_imported   – existing + candidates → (words, inserted)  (pure, sync)
run_smart_import – sample → plan → apply → store.import_words

Heavy lifting is delegated to:
  lingovault.plan     – PlanRequester, PlanNormalizer, path expressions
  lingovault.extract  – ExtractorRegistry
  lingovault.mapping  – FieldResolver, HeuristicRepair
  lingovault.merge    – DedupMerger
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ValidationError

from lingovault.errors import SmartImportError
from lingovault.extract.registry import ExtractorRegistry, extract_records
from lingovault.ir import ImportPlan, WordItem
from lingovault.logger import get_logger
from lingovault.mapping.repair import HeuristicRepair
from lingovault.mapping.resolver import FieldResolver
from lingovault.merge import merge_imported
from lingovault.plan.normalizer import normalize_plan
from lingovault.plan.requester import PlanRequester, build_sample

logger = get_logger(__name__)

ImportStatus = Literal["imported", "no_matches", "failed"]

__all__ = [
    "ImportOutcome",
    "apply_plan",
    "apply_smart_import_plan",
    "format_import_source",
    "merge_imported",
    "run_smart_import",
]


def format_import_source(date: Optional[datetime] = None) -> str:
    """Batch label such as ``import-250314-0915``."""
    date = date or datetime.now()
    return date.strftime("import-%y%m%d-%H%M")


def _ensure_plan(plan: Any) -> ImportPlan:
    if isinstance(plan, BaseModel) and hasattr(plan, "field_map"):
        return plan
    return normalize_plan(plan)


# ---------------------------------------------------------------------------
# apply
# ---------------------------------------------------------------------------

def apply_plan(
    raw_input: str,
    plan: Any,
    source_label: str,
    *,
    now_ms: Optional[int] = None,
    registry: Optional[ExtractorRegistry] = None,
) -> List[WordItem]:
    """
    Convert *raw_input* into word items according to *plan*.

    *plan* may be an ImportPlan or an untrusted mapping (normalized first).
    Each item gets a fresh id and ``created_at = now_ms + row index`` so
    rows sharing one clock tick keep their relative order. Rows without an
    English value are dropped.
    """
    plan = _ensure_plan(plan)
    records = registry.extract(raw_input, plan) if registry else extract_records(raw_input, plan)
    if not records:
        logger.info("apply_plan: no records extracted (format=%s)", plan.format)
        return []

    resolver = FieldResolver.for_plan(plan)
    now = int(time.time() * 1000) if now_ms is None else now_ms

    words: List[WordItem] = []
    dropped = 0
    for index, record in enumerate(records):
        fields = HeuristicRepair.repair(resolver.resolve(record), record)
        if not fields.english:
            dropped += 1
            continue
        try:
            words.append(
                WordItem(
                    english=fields.english,
                    chinese=fields.chinese,
                    example=fields.example or None,
                    tags=fields.tags,
                    is_mastered=0,
                    created_at=now + index,
                    source=source_label,
                )
            )
        except ValidationError as exc:
            dropped += 1
            logger.warning("apply_plan: dropping record %d: %s", index, exc)

    logger.info(
        "apply_plan: format=%s records=%d words=%d dropped=%d",
        plan.format,
        len(records),
        len(words),
        dropped,
    )
    return words


apply_smart_import_plan = apply_plan


# ---------------------------------------------------------------------------
# end-to-end
# ---------------------------------------------------------------------------

@dataclass
class ImportOutcome:
    """
    Result of one smart import.

    ``no_matches`` means the operation succeeded but added nothing (no
    records, or every record was a duplicate); ``failed`` means the plan
    could not be obtained and nothing was touched.
    """
    status: ImportStatus
    inserted: int = 0
    extracted: int = 0
    plan: Optional[ImportPlan] = None
    source: Optional[str] = None
    error: Optional[str] = None
    words: List[WordItem] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "inserted": self.inserted,
            "extracted": self.extracted,
            "plan": self.plan.to_dict() if self.plan is not None else None,
            "source": self.source,
            "error": self.error,
        }


def run_smart_import(
    raw_input: str,
    store: Any,
    *,
    requester: Optional[PlanRequester] = None,
    plan: Any = None,
    source_label: Optional[str] = None,
    sample_lines: Optional[int] = None,
) -> ImportOutcome:
    """
    Full smart import against *store* (anything with ``import_words``).

    Either *requester* or a ready *plan* must be given. The store is only
    touched after the plan is in hand and extraction has finished, so a
    failed or interrupted plan request leaves it unchanged.
    """
    if not (raw_input or "").strip():
        return ImportOutcome(status="no_matches")

    source = source_label or format_import_source()
    if plan is None:
        if requester is None:
            raise ValueError("run_smart_import needs a requester or a plan")
        sample = build_sample(raw_input) if sample_lines is None else build_sample(raw_input, sample_lines)
        try:
            plan = requester.request_plan(sample)
        except SmartImportError as exc:
            logger.error("Smart import failed before extraction: %s", exc)
            return ImportOutcome(status="failed", source=source, error=str(exc))
    else:
        plan = _ensure_plan(plan)

    words = apply_plan(raw_input, plan, source)
    if not words:
        return ImportOutcome(status="no_matches", plan=plan, source=source)

    inserted = store.import_words(words)
    logger.info("Smart import %s: extracted=%d inserted=%d", source, len(words), inserted)
    return ImportOutcome(
        status="imported" if inserted else "no_matches",
        inserted=inserted,
        extracted=len(words),
        plan=plan,
        source=source,
        words=words,
    )

