"""Classify an imported file into one of the supported formats."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any

from gamescript.core.constants import Engine, FileFormat

logger = logging.getLogger(__name__)

_KIRIKIRI_SUFFIXES = (".ks", ".tjs")


@dataclass(frozen=True)
class Detection:
    """Detected format of one file.

    ``data`` holds the decoded JSON value for JSON formats so the parser does
    not need to decode the content a second time.
    """

    format: FileFormat
    data: Any = None

    @property
    def engine(self) -> Engine:
        return self.format.engine


def looks_like_rpgmaker(data: Any) -> bool:
    """Top-level check: a map (``events`` array), System.json or a database table ([null, ...])."""
    if isinstance(data, dict):
        return isinstance(data.get("events"), list) or ("gameTitle" in data and "terms" in data)
    if isinstance(data, list):
        return len(data) > 0 and data[0] is None
    return False


def detect_format(filename: str, content: str) -> Detection:
    """First-match classification by extension, then by JSON shape.

    Never raises: unknown extensions and malformed JSON fall back to RAW.
    """
    suffix = PurePath(filename).suffix.lower()

    if suffix == ".json":
        try:
            data = json.loads(content)
        except ValueError as e:
            logger.warning("Malformed JSON in %s, importing as raw text: %s", filename, e)
            return Detection(FileFormat.RAW)
        if looks_like_rpgmaker(data):
            return Detection(FileFormat.RPGMAKER, data)
        return Detection(FileFormat.JSON, data)

    if suffix in _KIRIKIRI_SUFFIXES:
        return Detection(FileFormat.KIRIKIRI)
    if suffix == ".rpy":
        return Detection(FileFormat.RENPY)
    if suffix == ".csv":
        return Detection(FileFormat.CSV)
    if suffix == ".srt":
        return Detection(FileFormat.SRT)

    return Detection(FileFormat.RAW)
