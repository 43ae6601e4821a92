"""Format parsers. Each one is a pure function of (filename, content)."""

from __future__ import annotations

from gamescript.core.constants import FileFormat
from gamescript.core.detector import Detection, detect_format
from gamescript.core.models import Entry
from gamescript.parsers.generic import parse_csv, parse_json, parse_raw, parse_srt
from gamescript.parsers.kirikiri import parse_kirikiri
from gamescript.parsers.renpy import parse_renpy
from gamescript.parsers.rpgmaker import parse_rpgmaker

__all__ = ["parse_file", "parse_detected"]


def parse_detected(filename: str, content: str, detection: Detection) -> list[Entry]:
    """Run the parser matching an existing detection."""
    fmt = detection.format
    if fmt == FileFormat.RPGMAKER:
        return parse_rpgmaker(filename, content, detection.data)
    if fmt == FileFormat.JSON:
        return parse_json(filename, content, detection.data)
    if fmt == FileFormat.KIRIKIRI:
        return parse_kirikiri(filename, content)
    if fmt == FileFormat.RENPY:
        return parse_renpy(filename, content)
    if fmt == FileFormat.CSV:
        return parse_csv(filename, content)
    if fmt == FileFormat.SRT:
        return parse_srt(filename, content)
    return parse_raw(filename, content)


def parse_file(filename: str, content: str) -> tuple[Detection, list[Entry]]:
    detection = detect_format(filename, content)
    return detection, parse_detected(filename, content, detection)
