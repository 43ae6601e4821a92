"""Project data model: entries, file snapshots and the project itself."""

from __future__ import annotations

import random
import string
from dataclasses import dataclass, field
from enum import Enum

from gamescript.core.constants import Engine, FileFormat


class Provenance(str, Enum):
    """How the current translation of an entry relates to the project engine."""
    NONE = "none"    # Untranslated
    SAME = "same"    # Produced for the same engine as the project
    OTHER = "other"  # Reused from a TM pair recorded under another engine


@dataclass
class Entry:
    """One addressable unit of translatable text.

    ``original`` never changes after extraction. ``path`` is only meaningful to
    the applier for the file named by ``file``.
    """

    id: str
    original: str
    path: str
    file: str = ""
    context: str = ""
    translated: str = ""
    engine_match: str | None = None  # Engine that produced `translated`

    @property
    def is_translated(self) -> bool:
        return bool(self.translated)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "original": self.original,
            "translated": self.translated,
            "path": self.path,
            "file": self.file,
            "context": self.context,
            "engine_match": self.engine_match,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Entry:
        return cls(
            id=data["id"],
            original=data["original"],
            path=data["path"],
            file=data.get("file", ""),
            context=data.get("context", ""),
            translated=data.get("translated", ""),
            engine_match=data.get("engine_match"),
        )


@dataclass(frozen=True)
class SourceFile:
    """Immutable snapshot of an imported file."""

    name: str
    content: str
    format: FileFormat = FileFormat.RAW


def new_project_id() -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(random.choices(alphabet, k=9))


@dataclass
class Project:
    """Ordered entries plus the original file snapshots they were taken from."""

    name: str
    engine: Engine = Engine.GENERIC
    entries: list[Entry] = field(default_factory=list)
    files: tuple[SourceFile, ...] = ()
    id: str = field(default_factory=new_project_id)

    def entries_for(self, filename: str) -> list[Entry]:
        return [e for e in self.entries if e.file == filename]

    def get_file(self, filename: str) -> SourceFile | None:
        for f in self.files:
            if f.name == filename:
                return f
        return None

    def provenance(self, entry: Entry) -> Provenance:
        if not entry.translated:
            return Provenance.NONE
        if entry.engine_match is None or entry.engine_match == self.engine.value:
            return Provenance.SAME
        return Provenance.OTHER

    def search(self, query: str) -> list[Entry]:
        """Case-insensitive filter over original and translated text."""
        q = query.lower()
        if not q:
            return list(self.entries)
        return [
            e for e in self.entries
            if q in e.original.lower() or q in e.translated.lower()
        ]

    def stats(self) -> tuple[int, int]:
        """Return (translated, total) entry counts."""
        done = sum(1 for e in self.entries if e.translated)
        return done, len(self.entries)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "engine": self.engine.value,
            "entries": [e.to_dict() for e in self.entries],
            "files": [
                {"name": f.name, "content": f.content, "format": f.format.value}
                for f in self.files
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Project:
        return cls(
            id=data.get("id") or new_project_id(),
            name=data.get("name", "New Project"),
            engine=Engine(data.get("engine", Engine.GENERIC.value)),
            entries=[Entry.from_dict(e) for e in data.get("entries", [])],
            files=tuple(
                SourceFile(
                    name=f["name"],
                    content=f["content"],
                    format=FileFormat(f.get("format", FileFormat.RAW.value)),
                )
                for f in data.get("files", [])
            ),
        )
