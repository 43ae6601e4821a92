"""Extract quoted dialogue from Ren'Py scripts (.rpy)."""

from __future__ import annotations

import re

from gamescript.core.models import Entry

# indent, optional speaker identifier, quoted payload with \" escapes, trailing blanks
RE_SAY = re.compile(
    r'^(?P<prefix>\s*(?:(?P<speaker>[A-Za-z_]\w*)\s+)?)"(?P<text>(?:[^"\\]|\\.)*)"(?P<suffix>\s*)$'
)


def parse_renpy(filename: str, content: str) -> list[Entry]:
    entries: list[Entry] = []
    for idx, raw in enumerate(content.split("\n")):
        line = raw[:-1] if raw.endswith("\r") else raw
        m = RE_SAY.match(line)
        if m is None:
            continue
        text = m.group("text")
        if not text.strip():
            continue
        speaker = m.group("speaker")
        entries.append(Entry(
            id=f"rpy-{filename}-{idx}",
            original=text,
            path=f"line-{idx}",
            file=filename,
            context=f"Speaker: {speaker}" if speaker else "Narration",
        ))
    return entries
