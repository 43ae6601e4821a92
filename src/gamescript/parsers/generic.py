"""Parsers for the structure-agnostic formats: generic JSON, CSV, SRT and raw text."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from gamescript.core.constants import RAW_PATH
from gamescript.core.models import Entry
from gamescript.core.paths import join_index, join_key

logger = logging.getLogger(__name__)

_RE_NUMERIC = re.compile(r"[+-]?\d+(?:\.\d+)?")

# Blank-line separator between subtitle blocks, captured so blocks can be rejoined
_RE_BLOCK_SEP = re.compile(r"(\r?\n(?:[ \t]*\r?\n)+)")


# ── Generic JSON ──


def _walk(node: Any, path: str, out: list[tuple[str, str]]) -> None:
    if isinstance(node, str):
        if node:
            out.append((path, node))
    elif isinstance(node, dict):
        for key, value in node.items():
            _walk(value, join_key(path, str(key)), out)
    elif isinstance(node, list):
        for i, value in enumerate(node):
            _walk(value, join_index(path, i), out)


def string_leaves(data: Any) -> list[tuple[str, str]]:
    """Depth-first (path, text) pairs for every non-empty string leaf."""
    out: list[tuple[str, str]] = []
    _walk(data, "", out)
    return out


def parse_json(filename: str, content: str, data: Any = None) -> list[Entry]:
    try:
        if data is None:
            data = json.loads(content)
    except ValueError:
        logger.exception("Failed to parse JSON file %s", filename)
        return []
    return [
        Entry(
            id=f"json-{filename}-{path}",
            original=text,
            path=path,
            file=filename,
            context=path,
        )
        for path, text in string_leaves(data)
    ]


# ── CSV ──


def split_row(line: str) -> list[str]:
    """Naive comma split. Quoted fields containing commas are NOT supported."""
    return line.split(",")


def is_numeric(text: str) -> bool:
    return bool(_RE_NUMERIC.fullmatch(text))


def parse_csv(filename: str, content: str) -> list[Entry]:
    entries: list[Entry] = []
    for r, raw in enumerate(content.split("\n")):
        row = raw[:-1] if raw.endswith("\r") else raw
        for c, cell in enumerate(split_row(row)):
            text = cell.strip()
            if not text or is_numeric(text):
                continue
            entries.append(Entry(
                id=f"csv-{filename}-{r}-{c}",
                original=text,
                path=f"row-{r}-col-{c}",
                file=filename,
                context=f"Row {r + 1}, column {c + 1}",
            ))
    return entries


# ── SRT ──


def split_blocks(content: str) -> list[str]:
    """Split subtitle content into [block, separator, block, ...].

    Blocks sit at even positions; ``"".join(pieces) == content``.
    """
    return _RE_BLOCK_SEP.split(content)


def block_lines(block: str) -> tuple[list[str], str]:
    """Return (lines without terminators, trailing terminator of the block)."""
    body = block.rstrip("\r\n")
    tail = block[len(body):]
    lines = [ln[:-1] if ln.endswith("\r") else ln for ln in body.split("\n")]
    return lines, tail


def parse_srt(filename: str, content: str) -> list[Entry]:
    entries: list[Entry] = []
    pieces = split_blocks(content)
    for b, block in enumerate(pieces[::2]):
        lines, _ = block_lines(block)
        if len(lines) < 3:
            continue
        text = "\n".join(lines[2:])
        if not text.strip():
            continue
        entries.append(Entry(
            id=f"srt-{filename}-{b}",
            original=text,
            path=f"block-{b}",
            file=filename,
            context=lines[1].strip(),
        ))
    return entries


# ── Raw fallback ──


def parse_raw(filename: str, content: str) -> list[Entry]:
    if not content.strip():
        return []
    return [Entry(
        id=f"raw-{filename}",
        original=content,
        path=RAW_PATH,
        file=filename,
        context="Raw File Content",
    )]
