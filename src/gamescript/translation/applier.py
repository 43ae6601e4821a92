"""Apply translations back onto a fresh parse of the original file content."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from gamescript.core.constants import RAW_PATH, FileFormat
from gamescript.core.models import Entry
from gamescript.core.paths import PatchResult, assign
from gamescript.parsers.generic import block_lines, split_blocks, split_row
from gamescript.parsers.renpy import RE_SAY

logger = logging.getLogger(__name__)

_RE_LINE_PATH = re.compile(r"line-(\d+)")
_RE_CELL_PATH = re.compile(r"row-(\d+)-col-(\d+)")
_RE_BLOCK_PATH = re.compile(r"block-(\d+)")
_RE_RENPY_TOKEN = re.compile(r'\\.|\\\Z|"', re.S)


@dataclass
class ApplyReport:
    """Patched text plus the outcome for every entry that was offered."""

    text: str
    results: dict[str, PatchResult] = field(default_factory=dict)

    @property
    def applied(self) -> int:
        return sum(1 for r in self.results.values() if r == PatchResult.APPLIED)

    @property
    def missed(self) -> list[str]:
        """Ids of translated entries that could not be written back."""
        return [
            eid for eid, r in self.results.items()
            if r in (PatchResult.PATH_NOT_FOUND, PatchResult.NOT_A_STRING)
        ]


def _split_lines(content: str) -> tuple[list[str], list[str]]:
    """Split into line bodies and their "\\r" remainders so CRLF survives."""
    bodies: list[str] = []
    crs: list[str] = []
    for raw in content.split("\n"):
        if raw.endswith("\r"):
            bodies.append(raw[:-1])
            crs.append("\r")
        else:
            bodies.append(raw)
            crs.append("")
    return bodies, crs


def _join_lines(bodies: list[str], crs: list[str]) -> str:
    return "\n".join(b + cr for b, cr in zip(bodies, crs, strict=True))


def _line_index(path: str, count: int) -> int | None:
    m = _RE_LINE_PATH.fullmatch(path)
    if m is None:
        return None
    idx = int(m.group(1))
    return idx if idx < count else None


def _apply_json(content: str, entries: list[Entry], report: ApplyReport) -> str:
    try:
        data = json.loads(content)
    except ValueError as e:
        logger.warning("Cannot re-parse JSON for reinjection, keeping original: %s", e)
        for entry in entries:
            report.results[entry.id] = PatchResult.PATH_NOT_FOUND
        return content

    for entry in entries:
        report.results[entry.id] = assign(data, entry.path, entry.translated)

    if not report.applied:
        return content
    return json.dumps(data, indent=2, ensure_ascii=False)


def _apply_kirikiri(content: str, entries: list[Entry], report: ApplyReport) -> str:
    bodies, crs = _split_lines(content)
    for entry in entries:
        idx = _line_index(entry.path, len(bodies))
        if idx is None:
            report.results[entry.id] = PatchResult.PATH_NOT_FOUND
            continue
        bodies[idx] = entry.translated
        report.results[entry.id] = PatchResult.APPLIED
    return _join_lines(bodies, crs)


def _escape_renpy(text: str) -> str:
    """Escape bare quotes and a dangling final backslash; escape pairs pass through."""

    def repl(m: re.Match) -> str:
        token = m.group()
        if token == '"':
            return '\\"'
        if token == "\\":
            return "\\\\"
        return token

    return _RE_RENPY_TOKEN.sub(repl, text)


def _apply_renpy(content: str, entries: list[Entry], report: ApplyReport) -> str:
    bodies, crs = _split_lines(content)
    for entry in entries:
        idx = _line_index(entry.path, len(bodies))
        m = RE_SAY.match(bodies[idx]) if idx is not None else None
        if idx is None or m is None:
            report.results[entry.id] = PatchResult.PATH_NOT_FOUND
            continue
        line = bodies[idx]
        start, end = m.span("text")
        bodies[idx] = line[:start] + _escape_renpy(entry.translated) + line[end:]
        report.results[entry.id] = PatchResult.APPLIED
    return _join_lines(bodies, crs)


def _apply_csv(content: str, entries: list[Entry], report: ApplyReport) -> str:
    bodies, crs = _split_lines(content)
    for entry in entries:
        m = _RE_CELL_PATH.fullmatch(entry.path)
        if m is None or int(m.group(1)) >= len(bodies):
            report.results[entry.id] = PatchResult.PATH_NOT_FOUND
            continue
        r, c = int(m.group(1)), int(m.group(2))
        cells = split_row(bodies[r])
        if c >= len(cells):
            report.results[entry.id] = PatchResult.PATH_NOT_FOUND
            continue
        cell = cells[c]
        stripped = cell.strip()
        lead = cell[: len(cell) - len(cell.lstrip())]
        trail = cell[len(lead) + len(stripped):]
        cells[c] = lead + entry.translated + trail
        bodies[r] = ",".join(cells)
        report.results[entry.id] = PatchResult.APPLIED
    return _join_lines(bodies, crs)


def _apply_srt(content: str, entries: list[Entry], report: ApplyReport) -> str:
    pieces = split_blocks(content)
    for entry in entries:
        m = _RE_BLOCK_PATH.fullmatch(entry.path)
        pos = int(m.group(1)) * 2 if m else -1
        if pos < 0 or pos >= len(pieces):
            report.results[entry.id] = PatchResult.PATH_NOT_FOUND
            continue
        block = pieces[pos]
        lines, tail = block_lines(block)
        if len(lines) < 3:
            report.results[entry.id] = PatchResult.PATH_NOT_FOUND
            continue
        nl = "\r\n" if "\r\n" in block else "\n"
        text = entry.translated.replace("\r\n", "\n").replace("\n", nl)
        pieces[pos] = lines[0] + nl + lines[1] + nl + text + tail
        report.results[entry.id] = PatchResult.APPLIED
    return "".join(pieces)


def _apply_raw(content: str, entries: list[Entry], report: ApplyReport) -> str:
    result = content
    for entry in entries:
        if entry.path != RAW_PATH:
            report.results[entry.id] = PatchResult.PATH_NOT_FOUND
            continue
        result = entry.translated
        report.results[entry.id] = PatchResult.APPLIED
    return result


_APPLIERS = {
    FileFormat.RPGMAKER: _apply_json,
    FileFormat.JSON: _apply_json,
    FileFormat.KIRIKIRI: _apply_kirikiri,
    FileFormat.RENPY: _apply_renpy,
    FileFormat.CSV: _apply_csv,
    FileFormat.SRT: _apply_srt,
    FileFormat.RAW: _apply_raw,
}


def apply_with_diagnostics(
    content: str,
    entries: Iterable[Entry],
    fmt: FileFormat,
) -> ApplyReport:
    """Rewrite *content* with every translated entry; report per-entry outcomes.

    Untranslated entries are left alone. Entries whose path no longer resolves
    are skipped. A raw-path entry overwrites the whole file, whatever the format.
    """
    report = ApplyReport(text=content)
    pending: list[Entry] = []
    raw: list[Entry] = []
    for entry in entries:
        if not entry.translated:
            report.results[entry.id] = PatchResult.UNTRANSLATED
        elif entry.path == RAW_PATH:
            raw.append(entry)
        else:
            pending.append(entry)

    text = content
    if pending:
        text = _APPLIERS[fmt](content, pending, report)
    if raw:
        text = _apply_raw(text, raw, report)

    for eid in report.missed:
        logger.debug("Skipped %s: %s", eid, report.results[eid].value)

    report.text = text
    return report


def apply_translations(content: str, entries: Iterable[Entry], fmt: FileFormat) -> str:
    """Return *content* with translations applied. Never raises on bad paths."""
    return apply_with_diagnostics(content, entries, fmt).text
