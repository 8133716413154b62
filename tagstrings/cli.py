"""
Command-line interface for tagstrings.

Provides commands for:
- Synchronizing catalogs with the strings found in a project
- Listing the strings a scan finds
- Listing the languages a translation backend supports
- Managing the translator API key

Usage:
    tagstrings sync myproject --add-language de --add-language fr
    tagstrings sync myproject --document --no-translate
    tagstrings scan myproject
    tagstrings languages --backend mymemory
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from tagstrings import __version__
from tagstrings.config import APP_NAME, BACKENDS, DEFAULT_BACKEND, HOMEPAGE, LANGUAGES
from tagstrings.keys import KeyManager
from tagstrings.models import TemplateRecord
from tagstrings.pipeline import SyncConfig, SyncPipeline
from tagstrings.scan.scanner import scan_project
from tagstrings.source.project import SourceProject

app = typer.Typer(
    name=APP_NAME,
    help="tagstrings: extract translator-tagged strings and keep translation catalogs in sync",
    add_completion=False,
)
console = Console()


def setup_logging(debug: bool = False) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=debug, markup=False)],
        force=True,
    )


def banner() -> None:
    console.print()
    console.print(
        f"[bright_green]Tagged string extraction and translation utility[/] "
        f"\\[version: [bold]{__version__}[/]; python: [bold]{platform.python_version()}[/]]"
    )
    console.print(HOMEPAGE)
    console.print()


def fail(error: Exception, debug: bool) -> None:
    console.print(f"[red]Error:[/] {escape(str(error))}", highlight=False)
    if debug:
        console.print_exception()
    raise typer.Exit(1)


def version_callback(value: bool):
    if value:
        console.print(f"tagstrings v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """tagstrings: translator-tagged string catalogs."""
    pass


@app.command()
def sync(
    project: Path = typer.Argument(..., help="Project folder to scan"),
    key: Optional[str] = typer.Option(
        None, "--key", "-k",
        help="Translator API key (default: $TRANSLATOR_KEY or ~/.tagstrings/keys.json)",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Catalog folder (default: <project>/i18n)",
    ),
    add_language: Optional[list[str]] = typer.Option(
        None, "--add-language", "-l",
        help="Create catalogs for a language code (repeatable)",
    ),
    no_translate: bool = typer.Option(
        False, "--no-translate",
        help="Write untranslated entries instead of calling a translator",
    ),
    module: bool = typer.Option(
        False, "--module",
        help="Write Python module catalogs (<lang>.py, the default)",
    ),
    document: bool = typer.Option(
        False, "--document",
        help="Write JSON document catalogs (messages.<lang>.json)",
    ),
    backend: str = typer.Option(
        DEFAULT_BACKEND, "--backend", "-b",
        help=f"Translation backend ({', '.join(BACKENDS)})",
    ),
    debug: bool = typer.Option(
        False, "--debug",
        help="Verbose logging and tracebacks on errors",
    ),
):
    """Scan a project and add missing strings to its catalogs."""
    setup_logging(debug)
    banner()

    config = SyncConfig(
        project_root=project,
        output_dir=output,
        add_languages=add_language or [],
        module=module,
        document=document,
        translate=not no_translate,
        backend=backend,
        api_key=key,
    )
    try:
        result = SyncPipeline(config).run()
    except Exception as e:
        fail(e, debug)
        return

    console.print(f"[cyan]Project:[/] {config.root}")
    console.print(f"[cyan]Strings found:[/] {len(result.table)}")
    pending = result.stats["entries_pending"]
    if pending:
        console.print(f"[yellow]Entries pending translation:[/] {pending}")
    console.print(f"\n[bright_green]Summary:[/] files updated: {len(result.updated_files)}")


@app.command()
def scan(
    project: Path = typer.Argument(..., help="Project folder to scan"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Catalog folder to leave out of the scan (default: <project>/i18n)",
    ),
    debug: bool = typer.Option(False, "--debug", help="Verbose logging"),
):
    """List the translatable strings found in a project."""
    setup_logging(debug)
    config = SyncConfig(project_root=project, output_dir=output)
    try:
        source = SourceProject.load(config.root, config.exclude_dirs, config.output)
        ctx = scan_project(source)
    except Exception as e:
        fail(e, debug)
        return

    table = Table(title=f"Strings in {config.root.name}")
    table.add_column("Key", style="cyan")
    table.add_column("Parameters", style="green")
    table.add_column("Note", style="yellow")
    table.add_column("Used at", style="dim")

    for record in ctx.table:
        table.add_row(
            record.catalog_key,
            ", ".join(p.signature() for p in record.params) or "-",
            record.notes.get(TemplateRecord.FULL_NOTE, ""),
            "\n".join(record.locations),
        )

    console.print(table)
    console.print(
        f"\n{len(ctx.table)} strings in {ctx.files_scanned} files "
        f"({ctx.calls_found} translator calls, target: [bold]{ctx.target.name}[/])"
    )


@app.command()
def languages(
    backend: str = typer.Option(
        DEFAULT_BACKEND, "--backend", "-b",
        help=f"Translation backend ({', '.join(BACKENDS)})",
    ),
    key: Optional[str] = typer.Option(None, "--key", "-k", help="Translator API key"),
    debug: bool = typer.Option(False, "--debug", help="Verbose logging"),
):
    """List the languages a translation backend supports."""
    setup_logging(debug)
    config = SyncConfig(project_root=Path.cwd(), backend=backend, api_key=key)
    try:
        translator = SyncPipeline(config).build_translator()
        supported = translator.supported_languages()
    except Exception as e:
        fail(e, debug)
        return

    table = Table(title=f"Languages supported by {translator.name}")
    table.add_column("Code", style="cyan")
    table.add_column("Language", style="green")
    for code in sorted(supported):
        table.add_row(code, supported[code] or LANGUAGES.get(code, code))
    console.print(table)


@app.command()
def key(
    action: str = typer.Argument(..., help="Action: set, status, delete"),
    value: Optional[str] = typer.Argument(None, help="Key to store (prompted when omitted)"),
    backend: str = typer.Option(DEFAULT_BACKEND, "--backend", "-b", help="Backend the key belongs to"),
):
    """Manage the translator API key.

    Examples:
        tagstrings key set            # Prompt for the Azure key and store it
        tagstrings key status         # Show where the key comes from
        tagstrings key delete         # Remove the stored key
    """
    km = KeyManager()

    if action == "set":
        if not value:
            value = typer.prompt(f"Enter API key for {backend}", hide_input=True)
        if not value:
            console.print("[red]Error:[/] Key cannot be empty")
            raise typer.Exit(1)
        location = km.set_key(backend, value)
        where = "OS keychain" if location == "keyring" else location
        console.print(f"[green]✓[/] API key for {backend} saved to {where}")

    elif action == "status":
        info = km.get_key_info(backend)
        if info.is_set:
            console.print(f"[green]✓[/] API key for {backend} is set")
            console.print(f"    Source: {info.source}")
            console.print(f"    Value: {info.masked_value}")
        else:
            console.print(f"[red]✗[/] No API key found for {backend}")
            console.print("\nTo set the key:")
            console.print("  Option 1: [cyan]tagstrings key set[/]")
            console.print("  Option 2: [cyan]export TRANSLATOR_KEY='your-key-here'[/]")

    elif action == "delete":
        if km.delete_key(backend):
            console.print(f"[green]✓[/] API key for {backend} deleted")
        else:
            console.print(f"[yellow]⚠[/] No stored key to delete for {backend}")

    else:
        console.print(f"[red]Error:[/] Unknown action '{action}'")
        console.print("Available actions: set, status, delete")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
