"""Constants shared by the detector, parsers and applier."""

from enum import Enum, IntEnum


class Engine(str, Enum):
    """Project-level engine tag."""
    RPGMAKER = "rpgmaker"
    KIRIKIRI = "kirikiri"
    RENPY = "renpy"
    UNITY = "unity"  # Generic JSON (Unity and friends)
    GENERIC = "generic"
    SUBTITLES = "subtitles"


class FileFormat(str, Enum):
    """Per-file format. Finer than Engine: CSV and raw text both map to GENERIC."""
    RPGMAKER = "rpgmaker"
    JSON = "json"
    KIRIKIRI = "kirikiri"
    RENPY = "renpy"
    CSV = "csv"
    SRT = "srt"
    RAW = "raw"

    @property
    def engine(self) -> Engine:
        return _FORMAT_ENGINE[self]

    @property
    def is_json(self) -> bool:
        return self in (FileFormat.RPGMAKER, FileFormat.JSON)


_FORMAT_ENGINE = {
    FileFormat.RPGMAKER: Engine.RPGMAKER,
    FileFormat.JSON: Engine.UNITY,
    FileFormat.KIRIKIRI: Engine.KIRIKIRI,
    FileFormat.RENPY: Engine.RENPY,
    FileFormat.CSV: Engine.GENERIC,
    FileFormat.SRT: Engine.SUBTITLES,
    FileFormat.RAW: Engine.GENERIC,
}


class EventCode(IntEnum):
    """RPG Maker MV/MZ event command codes that carry text."""
    SHOW_CHOICES = 102
    SHOW_TEXT = 401


# Path of the whole-file fallback entry. Not addressable: reinjection overwrites.
RAW_PATH = "raw"

# Originals sent to the provider per request
BATCH_SIZE = 10

# Pause after each call to a free, rate-limited endpoint (seconds)
FREE_ENDPOINT_DELAY = 0.2
