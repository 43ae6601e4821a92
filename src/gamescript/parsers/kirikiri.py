"""Extract dialogue lines from KiriKiri/KAG scenario scripts (.ks, .tjs).

Line oriented: anything that is not a comment, label, command or a line made
only of tags is dialogue. Inline tags such as ``[ruby text=...]`` stay inside
the entry so they survive translation untouched.
"""

from __future__ import annotations

import re

from gamescript.core.models import Entry

_COMMENT_PREFIXES = (";", "//")
_LABEL_PREFIX = "*"
_COMMAND_PREFIX = "@"

# One or more [tag] groups, no nesting, only whitespace in between
_RE_TAG_ONLY = re.compile(r"(?:\[[^\[\]]*\]\s*)+")


def is_tag_only(stripped: str) -> bool:
    return bool(_RE_TAG_ONLY.fullmatch(stripped))


def is_dialogue(line: str) -> bool:
    stripped = line.strip()
    if not stripped:
        return False
    if stripped.startswith(_COMMENT_PREFIXES):
        return False
    if stripped.startswith((_LABEL_PREFIX, _COMMAND_PREFIX)):
        return False
    return not is_tag_only(stripped)


def parse_kirikiri(filename: str, content: str) -> list[Entry]:
    entries: list[Entry] = []
    for idx, raw in enumerate(content.split("\n")):
        line = raw[:-1] if raw.endswith("\r") else raw
        if not is_dialogue(line):
            continue
        entries.append(Entry(
            id=f"ks-{filename}-{idx}",
            original=line,
            path=f"line-{idx}",
            file=filename,
            context="Dialogue",
        ))
    return entries
