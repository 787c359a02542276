"""CLI entry point for locus -- gettext-style message extraction."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .catalog import MessageCatalog, render_template, write_template
from .config import LocusConfig, load_config
from .errors import ConfigError, InvalidRootError
from .translation import DEFAULT_LOCALE, TranslationContext
from .walker import DirectoryWalker

app = typer.Typer(
    name="locus",
    help="Extract translatable strings from source trees into a message template.",
    add_completion=False,
)

# Diagnostics go to stderr so a template printed on stdout stays clean.
console = Console(stderr=True)

EXIT_FAILED = 1
EXIT_USAGE = 2


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, show_time=False)],
        force=True,
    )


def _load_config_or_exit(root: Path) -> LocusConfig:
    try:
        return load_config(root)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=EXIT_USAGE)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def extract(
    root: Optional[Path] = typer.Argument(None, help="Directory to scan (default: current directory)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the template here instead of stdout."),
    extensions: Optional[List[str]] = typer.Option(None, "--extension", "-e", help="File suffix to scan (repeatable)."),
    markers: Optional[List[str]] = typer.Option(None, "--marker", "-k", help="Marker function name (repeatable)."),
    ignore_parse_errors: bool = typer.Option(False, "--ignore-parse-errors", help="Succeed even if some files fail to parse."),
    workers: Optional[int] = typer.Option(None, "--workers", "-j", min=1, help="Parallel file workers."),
    locale: Optional[str] = typer.Option(None, "--locale", help="Locale recorded in the template header."),
    no_header: bool = typer.Option(False, "--no-header", help="Omit the template header entry."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every directory and file."),
) -> None:
    """Scan ROOT and emit a message template for every marked string."""
    _configure_logging(verbose)
    target = Path(root).resolve() if root else Path.cwd()
    cfg = _load_config_or_exit(target)

    # CLI flags override config values (only when explicitly provided).
    if extensions:
        cfg.extensions = list(extensions)
    if markers:
        cfg.markers = list(markers)
    if workers is not None:
        cfg.workers = workers
    if locale is not None:
        cfg.locale = locale
    effective_ignore = ignore_parse_errors or cfg.ignore_parse_errors
    cfg.ignore_parse_errors = effective_ignore

    catalog = MessageCatalog()
    try:
        walker = DirectoryWalker(catalog=catalog, options=cfg.walk_options())
        report = walker.walk(target)
    except InvalidRootError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=EXIT_USAGE)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=EXIT_USAGE)

    render_opts = {"header": not no_header, "project": cfg.project, "locale": cfg.locale}
    out_path = output or (target / cfg.output if cfg.output else None)
    if out_path is not None:
        write_template(catalog, out_path, **render_opts)
        console.print(f"[green]Wrote[/green] {len(catalog)} message(s) to {out_path}")
    else:
        typer.echo(render_template(catalog, **render_opts), nl=False)

    console.print(
        f"[bold]{report.files_seen}[/bold] file(s) scanned, "
        f"[bold]{len(catalog)}[/bold] message(s), "
        f"[yellow]{len(report.warnings)}[/yellow] warning(s)"
    )

    if not report.succeeded(effective_ignore):
        console.print("[red]Extraction failed.[/red] Files with errors:")
        for path in sorted(report.files_with_errors):
            console.print(f"  {path}", markup=False)
        raise typer.Exit(code=EXIT_FAILED)
    if report.files_with_errors:
        console.print(
            f"[yellow]{len(report.files_with_errors)} file(s) skipped due to errors.[/yellow]"
        )


@app.command()
def translate(
    msgid: str = typer.Argument(..., help="Message id to translate."),
    locale: str = typer.Option(DEFAULT_LOCALE, "--locale", help="Target locale."),
) -> None:
    """Print the translation of MSGID (identity until catalogs are loaded)."""
    ctx = TranslationContext(locale=locale)
    typer.echo(ctx.translate(msgid))


@app.command()
def config(
    root: Optional[Path] = typer.Argument(None, help="Project directory (default: current directory)."),
) -> None:
    """Show the effective locus configuration for ROOT."""
    target = Path(root).resolve() if root else Path.cwd()
    cfg = _load_config_or_exit(target)
    console.print("[bold]locus config:[/bold]")
    for field_name in LocusConfig.model_fields:
        console.print(f"  {field_name} = {getattr(cfg, field_name)!r}", markup=False, highlight=False)
