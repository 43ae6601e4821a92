"""Single-writer store for a project's entries.

Every change to entry translations goes through :meth:`ProjectStore.dispatch`
as a command object. Commands are applied in the order they are dispatched;
when a manual edit and a batch result touch the same entry, the command
dispatched last wins. There is no locking: the store lives on one event loop.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from gamescript.core.models import Entry, Project
from gamescript.translation.memory import TranslationMemory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetTranslation:
    """Manual edit of one entry, fanned out to entries with the same original."""
    entry_id: str
    translated: str


@dataclass(frozen=True)
class PropagateTranslation:
    """Provider result for an original string, applied to every match."""
    original: str
    translated: str
    engine: str


@dataclass(frozen=True)
class FillFromMemory:
    """TM hit for a single untranslated entry."""
    entry_id: str
    translated: str
    engine: str


@dataclass(frozen=True)
class CopyOriginals:
    """Bulk action: every translation becomes its original."""


@dataclass(frozen=True)
class ClearTranslations:
    """Bulk action: every translation is emptied."""


Command = SetTranslation | PropagateTranslation | FillFromMemory | CopyOriginals | ClearTranslations

Listener = Callable[[Command, list[str]], None]


class ProjectStore:
    """Owns a Project and is the only code path that mutates its entries."""

    def __init__(self, project: Project) -> None:
        self._project = project
        self._by_id: dict[str, Entry] = {}
        self._by_original: dict[str, list[Entry]] = {}
        for entry in project.entries:
            if entry.id in self._by_id:
                logger.warning("Duplicate entry id %s ignored for lookups", entry.id)
                continue
            self._by_id[entry.id] = entry
            self._by_original.setdefault(entry.original, []).append(entry)
        self._listeners: list[Listener] = []

    @property
    def project(self) -> Project:
        return self._project

    @property
    def engine(self) -> str:
        return self._project.engine.value

    def get(self, entry_id: str) -> Entry | None:
        return self._by_id.get(entry_id)

    def entries_with_original(self, original: str) -> list[Entry]:
        return list(self._by_original.get(original, []))

    def subscribe(self, listener: Listener) -> None:
        """Register a callback receiving (command, changed_ids) after each dispatch."""
        self._listeners.append(listener)

    def dispatch(self, command: Command) -> list[str]:
        """Apply one command. Returns the ids of entries whose translation changed."""
        changed: list[str] = []

        def write(entry: Entry, translated: str, engine: str | None) -> None:
            if entry.translated != translated or entry.engine_match != engine:
                changed.append(entry.id)
            entry.translated = translated
            entry.engine_match = engine

        if isinstance(command, SetTranslation):
            target = self._by_id.get(command.entry_id)
            if target is None:
                logger.warning("Edit for unknown entry %s ignored", command.entry_id)
            else:
                engine = self.engine if command.translated else None
                for entry in self._by_original.get(target.original, []):
                    write(entry, command.translated, engine)
        elif isinstance(command, PropagateTranslation):
            for entry in self._by_original.get(command.original, []):
                write(entry, command.translated, command.engine)
        elif isinstance(command, FillFromMemory):
            entry = self._by_id.get(command.entry_id)
            if entry is not None and not entry.translated:
                write(entry, command.translated, command.engine)
        elif isinstance(command, CopyOriginals):
            for entry in self._project.entries:
                write(entry, entry.original, self.engine)
        elif isinstance(command, ClearTranslations):
            for entry in self._project.entries:
                write(entry, "", None)
        else:
            raise TypeError(f"Unknown command: {command!r}")

        for listener in self._listeners:
            listener(command, changed)
        return changed


def edit_translation(
    store: ProjectStore,
    entry_id: str,
    translated: str,
    target_lang: str,
    memory: TranslationMemory | None = None,
) -> list[str]:
    """Manual edit: update every same-original entry and upsert the TM pair."""
    changed = store.dispatch(SetTranslation(entry_id, translated))
    entry = store.get(entry_id)
    if memory is not None and entry is not None:
        memory.put(entry.original, translated, target_lang, store.engine)
    return changed


def fill_from_memory(
    store: ProjectStore,
    memory: TranslationMemory,
    target_lang: str,
) -> int:
    """Fill every untranslated entry that has a TM pair for *target_lang*.

    Call after loading a project and whenever the target language changes.
    Returns the number of entries filled.
    """
    pending = [e for e in store.project.entries if not e.translated]
    if not pending:
        return 0
    hits = memory.get_batch([e.original for e in pending], target_lang)
    filled = 0
    for entry in pending:
        hit = hits.get(entry.original)
        if hit is None:
            continue
        filled += len(store.dispatch(FillFromMemory(entry.id, hit.translated, hit.engine)))
    if filled:
        logger.info("Translation memory filled %d of %d entries", filled, len(pending))
    return filled
