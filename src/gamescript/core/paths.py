"""Structural addresses into parsed JSON documents.

A path is a sequence of dotted keys and bracketed indices, e.g.
``events[2].pages[0].list[5].parameters[0]`` or ``[3].name``. Keys are looked
up in objects, indices in arrays; a key never matches an array slot. A key
that is empty or contains ``.``, ``[``, ``]`` or ``"`` is written as a quoted
segment, ``menu["title.main"]``, so every leaf has exactly one path.
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any

_RE_SEGMENT = re.compile(r'\[(\d+)\]|\[("(?:[^"\\]|\\.)*")\]|([^.\[\]"]+)')
_RE_PLAIN_KEY = re.compile(r'[^.\[\]"]+')

Segment = str | int


class PatchResult(str, Enum):
    """Outcome of writing one entry back into its document."""
    APPLIED = "applied"
    PATH_NOT_FOUND = "path_not_found"
    NOT_A_STRING = "not_a_string"
    UNTRANSLATED = "untranslated"


def join_key(prefix: str, key: str) -> str:
    if not _RE_PLAIN_KEY.fullmatch(key):
        return f"{prefix}[{json.dumps(key, ensure_ascii=False)}]"
    return f"{prefix}.{key}" if prefix else key


def join_index(prefix: str, index: int) -> str:
    return f"{prefix}[{index}]"


def split_path(path: str) -> list[Segment]:
    """Split a path into keys (str) and indices (int)."""
    segments: list[Segment] = []
    for m in _RE_SEGMENT.finditer(path):
        index, quoted, key = m.groups()
        if index is not None:
            segments.append(int(index))
        elif quoted is not None:
            segments.append(json.loads(quoted))
        else:
            segments.append(key)
    return segments


def _step(node: Any, segment: Segment) -> tuple[bool, Any]:
    if isinstance(segment, int):
        if isinstance(node, list) and 0 <= segment < len(node):
            return True, node[segment]
        return False, None
    if isinstance(node, dict) and segment in node:
        return True, node[segment]
    return False, None


def resolve(document: Any, path: str) -> tuple[bool, Any]:
    """Return (found, value) for *path* inside *document*."""
    node = document
    for segment in split_path(path):
        found, node = _step(node, segment)
        if not found:
            return False, None
    return True, node


def assign(document: Any, path: str, value: str) -> PatchResult:
    """Write *value* at *path*, only over an existing string.

    Missing intermediate segments abandon the write; nothing is created.
    """
    segments = split_path(path)
    if not segments:
        return PatchResult.PATH_NOT_FOUND

    node = document
    for segment in segments[:-1]:
        found, node = _step(node, segment)
        if not found:
            return PatchResult.PATH_NOT_FOUND

    last = segments[-1]
    found, current = _step(node, last)
    if not found:
        return PatchResult.PATH_NOT_FOUND
    if not isinstance(current, str):
        return PatchResult.NOT_A_STRING

    node[last] = value
    return PatchResult.APPLIED
