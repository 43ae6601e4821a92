"""SQLite translation memory shared across projects.

Pairs are keyed by ``"<target_lang>:<original>"``. Writes are whole-row
upserts; an unreadable database behaves as an empty memory and a failed
write is logged and dropped.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_DIR = Path.home() / ".gamescript"
DEFAULT_MEMORY_DB = DEFAULT_MEMORY_DIR / "memory.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS memory (
    key TEXT PRIMARY KEY,
    target_lang TEXT NOT NULL,
    original TEXT NOT NULL,
    translated TEXT NOT NULL,
    engine TEXT NOT NULL DEFAULT '',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


@dataclass(frozen=True)
class MemoryEntry:
    original: str
    translated: str
    target_lang: str
    engine: str

    @property
    def key(self) -> str:
        return memory_key(self.target_lang, self.original)


def memory_key(target_lang: str, original: str) -> str:
    return f"{target_lang}:{original}"


class TranslationMemory:
    """Persistent (target_lang, original) → translation store."""

    def __init__(self, db_path: str | Path | None = None) -> None:
        if db_path is None:
            db_path = DEFAULT_MEMORY_DB
        self._db_path = Path(db_path)
        self._conn = self._open()

    def _open(self) -> sqlite3.Connection:
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self._db_path))
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(_SCHEMA)
            return conn
        except (sqlite3.DatabaseError, OSError) as e:
            logger.warning(
                "Translation memory %s is unreadable, using an empty one: %s",
                self._db_path, e,
            )
            conn = sqlite3.connect(":memory:")
            conn.executescript(_SCHEMA)
            return conn

    @property
    def db_path(self) -> Path:
        return self._db_path

    def get(self, original: str, target_lang: str) -> MemoryEntry | None:
        """Look up one pair. Returns None if not found or unreadable."""
        try:
            cursor = self._conn.execute(
                "SELECT original, translated, target_lang, engine FROM memory WHERE key = ?",
                (memory_key(target_lang, original),),
            )
            row = cursor.fetchone()
        except sqlite3.DatabaseError as e:
            logger.warning("Translation memory read failed: %s", e)
            return None
        return MemoryEntry(*row) if row else None

    def get_batch(self, originals: list[str], target_lang: str) -> dict[str, MemoryEntry]:
        """Look up many originals at once. Returns {original: entry} for hits."""
        if not originals:
            return {}
        keys = list(dict.fromkeys(memory_key(target_lang, o) for o in originals))
        # SQLite has a limit of ~999 variables; chunk to stay well within it
        chunk_size = 900
        result: dict[str, MemoryEntry] = {}
        try:
            for i in range(0, len(keys), chunk_size):
                chunk = keys[i : i + chunk_size]
                placeholders = ",".join("?" for _ in chunk)
                cursor = self._conn.execute(
                    f"SELECT original, translated, target_lang, engine FROM memory "
                    f"WHERE key IN ({placeholders})",
                    chunk,
                )
                for row in cursor.fetchall():
                    entry = MemoryEntry(*row)
                    result[entry.original] = entry
        except sqlite3.DatabaseError as e:
            logger.warning("Translation memory read failed: %s", e)
            return {}
        return result

    def put(self, original: str, translated: str, target_lang: str, engine: str) -> None:
        """Upsert one pair. Empty originals or translations are ignored."""
        self.put_batch([MemoryEntry(original, translated, target_lang, engine)])

    def put_batch(self, entries: list[MemoryEntry]) -> None:
        rows = [
            (e.key, e.target_lang, e.original, e.translated, e.engine)
            for e in entries
            if e.original and e.translated
        ]
        if not rows:
            return
        try:
            self._conn.executemany(
                "INSERT OR REPLACE INTO memory (key, target_lang, original, translated, engine) "
                "VALUES (?, ?, ?, ?, ?)",
                rows,
            )
            self._conn.commit()
        except sqlite3.DatabaseError as e:
            logger.warning("Translation memory write failed, %d pairs not saved: %s", len(rows), e)

    def entries(self, target_lang: str | None = None) -> list[MemoryEntry]:
        """All stored pairs, optionally restricted to one target language."""
        sql = "SELECT original, translated, target_lang, engine FROM memory"
        params: tuple[str, ...] = ()
        if target_lang is not None:
            sql += " WHERE target_lang = ?"
            params = (target_lang,)
        try:
            cursor = self._conn.execute(sql + " ORDER BY created_at, key", params)
            return [MemoryEntry(*row) for row in cursor.fetchall()]
        except sqlite3.DatabaseError as e:
            logger.warning("Translation memory read failed: %s", e)
            return []

    def count(self) -> int:
        """Return total number of stored pairs."""
        try:
            cursor = self._conn.execute("SELECT COUNT(*) FROM memory")
        except sqlite3.DatabaseError as e:
            logger.warning("Translation memory read failed: %s", e)
            return 0
        return cursor.fetchone()[0]  # type: ignore[return-value]

    def clear(self) -> int:
        """Remove every pair. Returns the number of rows deleted."""
        cursor = self._conn.execute("DELETE FROM memory")
        self._conn.commit()
        return cursor.rowcount

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> TranslationMemory:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
