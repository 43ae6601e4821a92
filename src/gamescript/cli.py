"""CLI interface for gamescript using Typer."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from gamescript import __version__
from gamescript.backends.base import TranslationProvider
from gamescript.core.models import Project

app = typer.Typer(
    name="gamescript",
    help="Extract, translate and reinject text in game script files.",
    add_completion=False,
)
memory_app = typer.Typer(help="Inspect or reset the translation memory.")
app.add_typer(memory_app, name="memory")

console = Console()

_verbose = False
_quiet = False

_API_KEY_ENV = {"deepl": "DEEPL_API_KEY", "gemini": "GEMINI_API_KEY"}


def _print(msg: str, *, verbose_only: bool = False) -> None:
    """Print respecting --verbose/--quiet flags. Errors bypass --quiet."""
    if _quiet:
        return
    if verbose_only and not _verbose:
        return
    console.print(msg)


def _setup_logging() -> None:
    level = logging.DEBUG if _verbose else logging.ERROR if _quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _check_files(files: list[Path]) -> None:
    for f in files:
        if not f.exists():
            console.print(f"[red]Error:[/red] File not found: {f}")
            raise typer.Exit(1)


def _create_provider(
    provider_name: str,
    *,
    api_key: str | None = None,
    model: str | None = None,
    use_dummy: bool = False,
) -> tuple[TranslationProvider, str]:
    from gamescript.pipeline import create_provider

    if use_dummy:
        provider_name = "dummy"
    if not api_key and provider_name in _API_KEY_ENV:
        api_key = os.environ.get(_API_KEY_ENV[provider_name]) or None

    try:
        return create_provider(provider_name, api_key=api_key, model=model)
    except (ValueError, ImportError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _import(files: list[Path], status: str) -> Project:
    from gamescript.pipeline import DuplicateFileError, import_files, read_files

    try:
        with console.status(status):
            return import_files(read_files(files))
    except DuplicateFileError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _open_memory(memory_path: Path | None):
    from gamescript.translation.memory import TranslationMemory

    return TranslationMemory(memory_path)


def _entries_table(project: Project, limit: int | None = None, title: str = "") -> Table:
    table = Table(title=title or None)
    table.add_column("ID", style="dim")
    table.add_column("Path")
    table.add_column("Original")
    table.add_column("Translated", style="green")

    entries = project.entries if limit is None else project.entries[:limit]
    for e in entries:
        table.add_row(e.id, e.path, escape(e.original[:60]), escape(e.translated[:60]))
    return table


def version_callback(value: bool) -> None:
    if value:
        console.print(f"gamescript {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show extra info (provider, per-file detection, debug logs).",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only show errors.",
    ),
) -> None:
    """gamescript: translate game scripts without breaking them."""
    global _verbose, _quiet
    _verbose = verbose
    _quiet = quiet
    _setup_logging()


@app.command()
def scan(
    files: list[Path] = typer.Argument(..., help="Script files to scan."),
    search: str | None = typer.Option(
        None, "--search", "-s", help="Only list entries containing this text.",
    ),
) -> None:
    """Detect formats and list the translatable entries."""
    _check_files(files)

    project = _import(files, "Parsing...")

    for source in project.files:
        count = len(project.entries_for(source.name))
        _print(f"{source.name}: [cyan]{source.format.value}[/cyan], {count} entries")

    shown = project.search(search) if search else project.entries
    table = Table(title=f"{project.name} ({project.engine.value}): {len(shown)} entries")
    table.add_column("ID", style="dim")
    table.add_column("Path")
    table.add_column("Context")
    table.add_column("Text")
    for e in shown:
        table.add_row(e.id, e.path, escape(e.context[:30]), escape(e.original[:80]))
    console.print(table)


@app.command()
def translate(
    files: list[Path] = typer.Argument(..., help="Script files to translate."),
    lang: str = typer.Option(
        "EN", "--lang", "-l",
        help="Target language (code or name, depending on the provider).",
    ),
    provider_name: str = typer.Option(
        "gemini", "--provider", "-p",
        help="Provider: gemini, deepl, google, mymemory, lingva, dummy.",
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", "-k",
        help="API key (defaults to DEEPL_API_KEY / GEMINI_API_KEY).",
    ),
    model: str | None = typer.Option(
        None, "--model", "-m", help="Model name (Gemini only).",
    ),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o",
        help="Directory for translated files. Defaults to <name>_<lang>/ next to the input.",
    ),
    zip_path: Path | None = typer.Option(
        None, "--zip", help="Write all translated files into this ZIP instead.",
    ),
    report: Path | None = typer.Option(
        None, "--report", "-r",
        help="Save report to file (json/md/csv).",
    ),
    save_project_path: Path | None = typer.Option(
        None, "--save-project", help="Save the project (entries + snapshots) as JSON.",
    ),
    memory_path: Path | None = typer.Option(
        None, "--memory", envvar="GAMESCRIPT_MEMORY",
        help="Translation memory database path.",
    ),
    no_memory: bool = typer.Option(
        False, "--no-memory", help="Do not read or write the translation memory.",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run",
        help="Translate but don't write the files.",
    ),
    use_dummy: bool = typer.Option(
        False, "--dummy",
        help="Use dummy provider (shortcut for --provider dummy).",
    ),
) -> None:
    """Translate script files and write reinjected copies."""
    from gamescript.pipeline import (
        default_zip_path,
        export_files,
        render_file,
        safe_name,
        save_project,
        write_export_dir,
        write_export_zip,
    )
    from gamescript.reporting.formatters import save_report
    from gamescript.reporting.report import TranslationReport
    from gamescript.translation.batch import BatchTranslator
    from gamescript.translation.store import ProjectStore, fill_from_memory

    _check_files(files)

    rpt = TranslationReport(
        target_lang=lang,
        dry_run=dry_run,
    )

    provider, rpt.provider = _create_provider(
        provider_name, api_key=api_key, model=model, use_dummy=use_dummy,
    )
    _print(f"Provider: [cyan]{rpt.provider}[/cyan]", verbose_only=True)

    project = _import(files, "Parsing files...")
    rpt.engine = project.engine.value

    _print(f"Engine: [cyan]{project.engine.value}[/cyan]")
    _print(f"Found [green]{len(project.entries)}[/green] translatable entries")

    if not project.entries:
        console.print("[yellow]No translatable strings found.[/yellow]")
        raise typer.Exit()

    store = ProjectStore(project)
    memory = None if no_memory else _open_memory(memory_path)

    if memory is not None:
        rpt.entries_from_memory = fill_from_memory(store, memory, lang)
        if rpt.entries_from_memory:
            _print(f"Memory hits: [green]{rpt.entries_from_memory}[/green]")

    pending = [e.id for e in project.entries if not e.translated]
    translator = BatchTranslator(store, provider, lang, memory=memory)

    if pending:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Translating", total=None)

            def on_progress(done: int, total: int) -> None:
                progress.update(task, completed=done, total=total)

            async def run():
                try:
                    return await translator.run(pending, on_progress=on_progress)
                finally:
                    await provider.close()

            result = asyncio.run(run())

        rpt.unique_strings = result.unique_strings
        rpt.batches = result.batches_done
        rpt.strings_translated = result.translated
        rpt.strings_fallback = result.fallbacks
        rpt.entries_updated = result.entries_updated
        rpt.stopped = result.stopped
        rpt.errors.extend(result.errors)

        _print(
            f"Translated [green]{result.translated}[/green] unique strings"
            f" in {result.batches_done} batches",
        )
        if result.fallbacks:
            _print(f"[yellow]{result.fallbacks} strings kept their original text[/yellow]")

    for source in project.files:
        diag = render_file(project, source)
        outcome = rpt.add_file(
            source.name, source.format.value, len(project.entries_for(source.name)),
        )
        outcome.applied = diag.applied
        outcome.skipped = diag.missed

    if not dry_run:
        pairs = export_files(project)
        base_dir = files[0].resolve().parent
        if zip_path is not None:
            write_export_zip(pairs, zip_path)
            rpt.output = str(zip_path)
        else:
            if output_dir is None:
                output_dir = base_dir / f"{safe_name(project.name)}_{safe_name(lang)}"
            write_export_dir(pairs, output_dir)
            rpt.output = str(output_dir)
        _print(f"Saved: [cyan]{rpt.output}[/cyan]")
        if rpt.entries_skipped:
            _print(f"[yellow]{rpt.entries_skipped} entries could not be written back[/yellow]")
    else:
        console.print("[yellow]Dry run: no files written.[/yellow]")
        console.print(_entries_table(project, limit=20, title="Translation Preview (first 20)"))
        _print(f"Would write: {default_zip_path(project, Path('.')).name}", verbose_only=True)

    if save_project_path is not None:
        save_project(project, save_project_path)
        _print(f"Project saved: [cyan]{save_project_path}[/cyan]")

    rpt.finish()

    if report:
        save_report(rpt, report)
        _print(f"Report saved: [cyan]{report}[/cyan]")

    if memory is not None:
        memory.close()


@app.command()
def export(
    project_file: Path = typer.Argument(..., help="Project JSON saved with --save-project."),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o", help="Directory for translated files.",
    ),
    zip_path: Path | None = typer.Option(
        None, "--zip", help="Write a ZIP instead of a directory.",
    ),
    lang: str | None = typer.Option(
        None, "--lang", "-l",
        help="Fill untranslated entries from memory for this language first.",
    ),
    memory_path: Path | None = typer.Option(
        None, "--memory", envvar="GAMESCRIPT_MEMORY",
        help="Translation memory database path.",
    ),
) -> None:
    """Reinject a saved project's translations into its original files."""
    from gamescript.pipeline import (
        ProjectFileError,
        default_zip_path,
        export_files,
        load_project,
        safe_name,
        write_export_dir,
        write_export_zip,
    )
    from gamescript.translation.store import ProjectStore, fill_from_memory

    _check_files([project_file])

    try:
        project = load_project(project_file)
    except ProjectFileError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if lang is not None:
        with _open_memory(memory_path) as memory:
            filled = fill_from_memory(ProjectStore(project), memory, lang)
        _print(f"Memory hits: [green]{filled}[/green]")

    done, total = project.stats()
    _print(f"{project.name}: {done}/{total} entries translated")

    pairs = export_files(project)
    if zip_path is not None:
        out = write_export_zip(pairs, zip_path)
    elif output_dir is not None:
        write_export_dir(pairs, output_dir)
        out = output_dir
    else:
        out = project_file.parent / f"{safe_name(project.name)}_translated"
        write_export_dir(pairs, out)
    _print(f"Saved: [cyan]{out}[/cyan]")
    _print(f"ZIP name would be {default_zip_path(project, out).name}", verbose_only=True)


@memory_app.command("stats")
def memory_stats(
    memory_path: Path | None = typer.Option(
        None, "--memory", envvar="GAMESCRIPT_MEMORY",
        help="Translation memory database path.",
    ),
) -> None:
    """Show how many pairs the translation memory holds."""
    with _open_memory(memory_path) as memory:
        console.print(f"Translation memory: {memory.db_path}")
        console.print(f"Pairs: [green]{memory.count()}[/green]")


@memory_app.command("list")
def memory_list(
    lang: str | None = typer.Option(None, "--lang", "-l", help="Only this target language."),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum rows to show."),
    memory_path: Path | None = typer.Option(
        None, "--memory", envvar="GAMESCRIPT_MEMORY",
        help="Translation memory database path.",
    ),
) -> None:
    """List stored translation pairs."""
    with _open_memory(memory_path) as memory:
        rows = memory.entries(lang)

    table = Table(title=f"Translation memory ({len(rows)} pairs)")
    table.add_column("Lang")
    table.add_column("Engine", style="dim")
    table.add_column("Original")
    table.add_column("Translated", style="green")
    for row in rows[:limit]:
        table.add_row(row.target_lang, row.engine, escape(row.original[:60]), escape(row.translated[:60]))
    console.print(table)


@memory_app.command("clear")
def memory_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation."),
    memory_path: Path | None = typer.Option(
        None, "--memory", envvar="GAMESCRIPT_MEMORY",
        help="Translation memory database path.",
    ),
) -> None:
    """Remove every pair from the translation memory."""
    if not yes and not typer.confirm("Clear all translation memory?"):
        raise typer.Exit()
    with _open_memory(memory_path) as memory:
        deleted = memory.clear()
    console.print(f"Removed [yellow]{deleted}[/yellow] pairs")
