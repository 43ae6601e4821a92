"""Output formatters for translation reports."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path

from gamescript.reporting.report import TranslationReport

CSV_FIELDS = ("file", "format", "entries", "applied", "untranslated", "skipped", "skipped_ids")


def to_json(report: TranslationReport, indent: int = 2) -> str:
    return json.dumps(report.to_dict(), indent=indent, default=str, ensure_ascii=False)


def to_markdown(report: TranslationReport) -> str:
    """Run summary followed by a per-file table and any skipped ids."""
    mode = "dry run" if report.dry_run else f"written to `{report.output}`"
    lines = [
        f"# {report.engine or 'unknown'} → {report.target_lang} via {report.provider}",
        "",
        f"{report.total_entries} entries, {mode}, {report.duration_seconds:.1f}s.",
        f"{report.entries_from_memory} from memory, {report.strings_translated} of "
        f"{report.unique_strings} unique strings translated in {report.batches} batches"
        f" ({report.strings_fallback} kept original).",
    ]
    if report.stopped:
        lines.append("Stopped before all batches were sent.")

    if report.files:
        lines.extend([
            "",
            "| File | Format | Entries | Applied | Untranslated | Skipped |",
            "|------|--------|--------:|--------:|-------------:|--------:|",
        ])
        for f in report.files:
            lines.append(
                f"| `{f.name}` | {f.format} | {f.entries} | {f.applied}"
                f" | {f.untranslated} | {len(f.skipped)} |"
            )

    skipped = [(f.name, entry_id) for f in report.files for entry_id in f.skipped]
    if skipped:
        lines.extend(["", "Not written back:", ""])
        lines.extend(f"- `{name}`: {entry_id}" for name, entry_id in skipped)

    if report.errors:
        lines.extend(["", "Provider errors:", ""])
        lines.extend(f"- {err}" for err in report.errors)

    return "\n".join(lines) + "\n"


def to_csv(report: TranslationReport) -> str:
    """One row per exported file."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_FIELDS)
    for f in report.files:
        writer.writerow([
            f.name, f.format, f.entries, f.applied, f.untranslated,
            len(f.skipped), " ".join(f.skipped),
        ])
    return output.getvalue()


def save_report(report: TranslationReport, path: str | Path) -> None:
    """Save report to file, choosing the format from the extension."""
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in (".md", ".markdown"):
        content = to_markdown(report)
    elif suffix == ".csv":
        content = to_csv(report)
    else:
        content = to_json(report)

    path.write_text(content, encoding="utf-8")
