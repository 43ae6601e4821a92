"""Deduplicating batch translator.

Distinct originals from the requested entries are sent to the provider in
fixed-size batches, one batch at a time. Each result is fanned out to every
entry of the project sharing that original and stored in translation memory,
so provider cost grows with distinct strings rather than with entries.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from gamescript.backends.base import TranslationProvider
from gamescript.core.constants import BATCH_SIZE
from gamescript.translation.memory import MemoryEntry, TranslationMemory
from gamescript.translation.store import ProjectStore, PropagateTranslation

logger = logging.getLogger(__name__)

# (batches_done, batches_total)
ProgressCallback = Callable[[int, int], None]


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


@dataclass
class RunResult:
    """Statistics of one batch run."""
    unique_strings: int = 0
    batches_total: int = 0
    batches_done: int = 0
    translated: int = 0
    fallbacks: int = 0
    entries_updated: int = 0
    stopped: bool = False
    errors: list[str] = field(default_factory=list)


def unique_originals(store: ProjectStore, entry_ids: Iterable[str]) -> list[str]:
    """Distinct originals of the given entries, in first-occurrence order."""
    seen: dict[str, None] = {}
    for entry_id in entry_ids:
        entry = store.get(entry_id)
        if entry is None:
            logger.debug("Unknown entry id %s skipped", entry_id)
            continue
        seen.setdefault(entry.original, None)
    return list(seen)


class BatchTranslator:
    """Runs batches sequentially against one provider and applies each result."""

    def __init__(
        self,
        store: ProjectStore,
        provider: TranslationProvider,
        target_lang: str,
        memory: TranslationMemory | None = None,
        batch_size: int = BATCH_SIZE,
    ) -> None:
        self._store = store
        self._provider = provider
        self._target_lang = target_lang
        self._memory = memory
        self._batch_size = batch_size
        self._state = RunState.IDLE
        self._stop_requested = False

    @property
    def state(self) -> RunState:
        return self._state

    def request_stop(self) -> None:
        """Stop dispatching new batches. The in-flight batch still completes."""
        self._stop_requested = True

    async def _call_provider(
        self, texts: list[str], context: str | None,
    ) -> list[tuple[str, bool]]:
        """Call the provider, degrading to the originals where it fails.

        Returns one (text, is_fallback) pair per input, in input order.
        """
        try:
            results = await self._provider.translate_batch(
                texts, self._target_lang, self._store.engine, context,
            )
        except Exception as e:
            logger.warning("Provider %s failed on a batch of %d: %s",
                           self._provider.name, len(texts), e)
            return [(text, True) for text in texts]

        if not isinstance(results, list):
            results = []
        if len(results) < len(texts):
            logger.warning("Provider %s returned %d results for %d strings",
                           self._provider.name, len(results), len(texts))

        out: list[tuple[str, bool]] = []
        for i, text in enumerate(texts):
            value = results[i] if i < len(results) else None
            if isinstance(value, str) and value:
                out.append((value, False))
            else:
                out.append((text, True))
        return out

    async def run(
        self,
        entry_ids: Iterable[str],
        *,
        context: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> RunResult:
        """Translate the given entries. Never raises for provider failures."""
        result = RunResult()
        originals = unique_originals(self._store, entry_ids)
        batches = [
            originals[i : i + self._batch_size]
            for i in range(0, len(originals), self._batch_size)
        ]
        result.unique_strings = len(originals)
        result.batches_total = len(batches)

        self._state = RunState.RUNNING
        self._stop_requested = False
        engine = self._store.engine

        try:
            for batch in batches:
                if self._stop_requested:
                    result.stopped = True
                    logger.info("Run stopped after %d of %d batches",
                                result.batches_done, result.batches_total)
                    break

                outcomes = await self._call_provider(batch, context)

                to_store: list[MemoryEntry] = []
                fallbacks = 0
                for original, (translated, is_fallback) in zip(batch, outcomes, strict=True):
                    changed = self._store.dispatch(
                        PropagateTranslation(original, translated, engine)
                    )
                    result.entries_updated += len(changed)
                    if is_fallback:
                        # Echoes are not translations; keep them out of TM
                        fallbacks += 1
                    else:
                        to_store.append(
                            MemoryEntry(original, translated, self._target_lang, engine)
                        )

                if fallbacks:
                    result.errors.append(
                        f"batch {result.batches_done + 1}: {fallbacks} string(s) kept original"
                    )
                result.fallbacks += fallbacks
                result.translated += len(to_store)
                if self._memory is not None and to_store:
                    self._memory.put_batch(to_store)

                result.batches_done += 1
                if on_progress is not None:
                    on_progress(result.batches_done, result.batches_total)
        finally:
            self._state = RunState.DONE

        return result
