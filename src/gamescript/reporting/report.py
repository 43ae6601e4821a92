"""Translation report data model.

A report has two levels: run totals filled from the batch result, and one
FileOutcome per exported snapshot describing how many of its entries were
written back.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime


@dataclass
class FileOutcome:
    name: str
    format: str
    entries: int = 0
    applied: int = 0
    skipped: list[str] = field(default_factory=list)

    @property
    def untranslated(self) -> int:
        return self.entries - self.applied - len(self.skipped)


@dataclass
class TranslationReport:
    """Collects statistics about a translation run."""

    target_lang: str = ""
    engine: str = ""
    provider: str = ""
    output: str = ""

    files: list[FileOutcome] = field(default_factory=list)

    entries_from_memory: int = 0
    unique_strings: int = 0
    batches: int = 0
    strings_translated: int = 0
    strings_fallback: int = 0
    entries_updated: int = 0

    dry_run: bool = False
    stopped: bool = False
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None

    errors: list[str] = field(default_factory=list)

    @property
    def total_entries(self) -> int:
        return sum(f.entries for f in self.files)

    @property
    def entries_applied(self) -> int:
        return sum(f.applied for f in self.files)

    @property
    def entries_skipped(self) -> int:
        return sum(len(f.skipped) for f in self.files)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def add_file(self, name: str, format: str, entries: int) -> FileOutcome:
        outcome = FileOutcome(name=name, format=format, entries=entries)
        self.files.append(outcome)
        return outcome

    def finish(self) -> None:
        self.finished_at = datetime.now()

    def to_dict(self) -> dict:
        data = {
            "target_lang": self.target_lang,
            "engine": self.engine,
            "provider": self.provider,
            "output": self.output,
            "total_entries": self.total_entries,
            "entries_from_memory": self.entries_from_memory,
            "unique_strings": self.unique_strings,
            "batches": self.batches,
            "strings_translated": self.strings_translated,
            "strings_fallback": self.strings_fallback,
            "entries_updated": self.entries_updated,
            "entries_applied": self.entries_applied,
            "entries_skipped": self.entries_skipped,
            "dry_run": self.dry_run,
            "stopped": self.stopped,
            "duration_seconds": self.duration_seconds,
            "files": [asdict(f) | {"untranslated": f.untranslated} for f in self.files],
            "errors": self.errors,
        }
        return data
