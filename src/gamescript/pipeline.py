"""Shared pipeline logic: import → memory fill → translate → export.

Used by the CLI (cli.py). Every step is a plain function over a Project or
ProjectStore so callers can run them separately, e.g. import now and export a
saved project later.
"""

from __future__ import annotations

import json
import logging
import os
import re
import zipfile
from collections.abc import Iterable
from pathlib import Path, PurePath

from gamescript.backends.base import TranslationProvider
from gamescript.core.constants import Engine
from gamescript.core.models import Entry, Project, SourceFile
from gamescript.parsers import parse_file
from gamescript.translation.applier import ApplyReport, apply_with_diagnostics

logger = logging.getLogger(__name__)

PROVIDERS = ("dummy", "gemini", "deepl", "google", "mymemory", "lingva")


class ProjectFileError(Exception):
    """Raised when a saved project cannot be read."""


class DuplicateFileError(ValueError):
    """Raised when two imported files would share one snapshot name."""


# ── Import ──


def import_files(files: Iterable[tuple[str, str]], name: str | None = None) -> Project:
    """Build a project from decoded (filename, content) pairs.

    The project engine is the engine of the last file processed. Mixed
    imports are logged: each snapshot keeps its own detected format, which is
    what export uses. Snapshot names must be unique: entries are tied to their
    file by name, so a second file with the same name is rejected.
    """
    snapshots: list[SourceFile] = []
    entries: list[Entry] = []
    engine = Engine.GENERIC
    seen_ids: set[str] = set()

    for filename, content in files:
        if any(s.name == filename for s in snapshots):
            raise DuplicateFileError(f"Two input files are named {filename}")
        detection, file_entries = parse_file(filename, content)
        snapshots.append(SourceFile(name=filename, content=content, format=detection.format))
        engine = detection.engine
        for entry in file_entries:
            if entry.id in seen_ids:
                logger.warning("Duplicate entry id %s in %s dropped", entry.id, filename)
                continue
            seen_ids.add(entry.id)
            entries.append(entry)
        logger.debug("%s: %s, %d entries", filename, detection.format.value, len(file_entries))

    engines = {f.format.engine for f in snapshots}
    if len(engines) > 1:
        logger.warning(
            "Mixed formats imported (%s); project engine set to %s from the last file",
            ", ".join(sorted(e.value for e in engines)), engine.value,
        )

    if name is None:
        name = PurePath(snapshots[0].name).stem if snapshots else ""
    return Project(name=name or "New Project", engine=engine, entries=entries, files=tuple(snapshots))


def snapshot_names(paths: list[Path]) -> list[str]:
    """Base names, or paths relative to the common parent when base names clash."""
    names = [p.name for p in paths]
    if len(set(names)) == len(names):
        return names
    resolved = [p.resolve() for p in paths]
    root = Path(os.path.commonpath([str(p.parent) for p in resolved]))
    return [p.relative_to(root).as_posix() for p in resolved]


def read_files(paths: Iterable[Path], encoding: str = "utf-8") -> list[tuple[str, str]]:
    """Read files as text, line endings untouched. A leading BOM is dropped."""
    paths = list(paths)
    pairs: list[tuple[str, str]] = []
    for path, name in zip(paths, snapshot_names(paths), strict=True):
        text = path.read_bytes().decode(encoding)
        pairs.append((name, text.removeprefix("\ufeff")))
    return pairs


# ── Provider creation ──


def create_provider(
    provider_name: str,
    *,
    api_key: str | None = None,
    model: str | None = None,
) -> tuple[TranslationProvider, str]:
    """Create a translation provider instance.

    Returns:
        Tuple of (provider_instance, provider_label_for_report).

    Raises:
        ValueError: Unknown provider, or a keyed provider without an API key.
    """
    if provider_name == "dummy":
        from gamescript.backends.dummy import DummyProvider
        return DummyProvider(), "dummy"
    elif provider_name == "mymemory":
        from gamescript.backends.free import MyMemoryProvider
        return MyMemoryProvider(), "mymemory"
    elif provider_name == "lingva":
        from gamescript.backends.free import LingvaProvider
        return LingvaProvider(), "lingva"
    elif provider_name == "google":
        from gamescript.backends.free import GoogleProvider
        return GoogleProvider(), "google"
    elif provider_name == "deepl":
        if not api_key:
            raise ValueError("DeepL API key required. Use --api-key or set DEEPL_API_KEY.")
        from gamescript.backends.deepl import DeepLProvider
        return DeepLProvider(api_key), "deepl"
    elif provider_name == "gemini":
        if not api_key:
            raise ValueError("Gemini API key required. Use --api-key or set GEMINI_API_KEY.")
        from gamescript.backends.gemini import DEFAULT_MODEL, GeminiProvider
        effective_model = model or DEFAULT_MODEL
        return GeminiProvider(api_key, model=effective_model), f"gemini:{effective_model}"
    raise ValueError(f"Unknown provider: {provider_name}. Choose one of {', '.join(PROVIDERS)}.")


# ── Export ──


def render_file(project: Project, source: SourceFile) -> ApplyReport:
    """Apply the project's current translations to one snapshot."""
    return apply_with_diagnostics(source.content, project.entries_for(source.name), source.format)


def export_files(project: Project) -> list[tuple[str, str]]:
    """Final (filename, text) pairs for every snapshot, in import order."""
    pairs: list[tuple[str, str]] = []
    for source in project.files:
        report = render_file(project, source)
        if report.missed:
            logger.warning("%s: %d translated entries could not be written back",
                           source.name, len(report.missed))
        pairs.append((source.name, report.text))
    return pairs


def safe_name(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower()


def write_export_dir(pairs: Iterable[tuple[str, str]], output_dir: Path) -> list[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for filename, text in pairs:
        out = output_dir / filename
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8", newline="")
        written.append(out)
    return written


def write_export_zip(pairs: Iterable[tuple[str, str]], zip_path: Path) -> Path:
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for filename, text in pairs:
            zf.writestr(filename, text)
    return zip_path


def default_zip_path(project: Project, directory: Path) -> Path:
    return directory / f"{safe_name(project.name)}_translated.zip"


# ── Project persistence ──


def save_project(project: Project, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(project.to_dict(), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def load_project(path: Path) -> Project:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Project.from_dict(data)
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise ProjectFileError(f"Cannot load project {path}: {e}") from e
