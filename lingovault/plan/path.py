"""
Dot/array-index path expressions over nested JSON-like values.

``"data.items.0.word"`` parses once into ``(Key("data"), Key("items"),
Index(0), Key("word"))`` and can then be resolved against any number of
records. Resolution never raises: anything that does not line up yields
an empty string.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

_INDEX_RE = re.compile(r"^\d+$", re.ASCII)


@dataclass(frozen=True)
class Key:
    name: str


@dataclass(frozen=True)
class Index:
    """
    A purely numeric segment. It indexes lists, but records built from
    delimited rows also carry numeric string keys (``"0"``, ``"1"``), so on
    a mapping it falls back to a key lookup by its original text.
    """
    position: int
    name: str


Segment = Union[Key, Index]


@dataclass(frozen=True)
class PathExpression:
    text: str
    segments: Tuple[Segment, ...]

    def __bool__(self) -> bool:
        return bool(self.segments)

    def lookup(self, value: Any) -> Any:
        return resolve_path(value, self)

    def resolve(self, value: Any) -> str:
        return coerce_to_string(resolve_path(value, self))


EMPTY_PATH = PathExpression(text="", segments=())


def parse_path(path: Optional[str]) -> PathExpression:
    if not isinstance(path, str) or not path.strip():
        return EMPTY_PATH
    segments = []
    for raw in path.split("."):
        segment = raw.strip()
        if not segment:
            continue
        if _INDEX_RE.match(segment):
            segments.append(Index(position=int(segment), name=segment))
        else:
            segments.append(Key(name=segment))
    if not segments:
        return EMPTY_PATH
    return PathExpression(text=path, segments=tuple(segments))


def resolve_path(value: Any, path: Union[PathExpression, str, None]) -> Any:
    """
    Walk *path* through *value* and return whatever sits there.

    Missing keys, out-of-range indices, key segments applied to lists and
    any traversal through ``None`` or a scalar all give ``""``. An empty
    path gives ``""`` as well.
    """
    expr = path if isinstance(path, PathExpression) else parse_path(path)
    if not expr:
        return ""

    current = value
    for segment in expr.segments:
        if current is None:
            return ""
        if isinstance(current, list):
            if not isinstance(segment, Index) or segment.position >= len(current):
                return ""
            current = current[segment.position]
        elif isinstance(current, dict):
            current = current.get(segment.name)
        else:
            return ""

    return "" if current is None else current


def coerce_to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ",".join(coerce_to_string(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def resolve(value: Any, path: Union[PathExpression, str, None]) -> str:
    """String-valued resolution: ``resolve({"w": 1}, "w") == "1"``."""
    try:
        return coerce_to_string(resolve_path(value, path))
    except (TypeError, ValueError, RecursionError):
        return ""
