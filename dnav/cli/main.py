"""Main CLI entrypoint for D-NAV.

Provides commands for extracting decision candidates, distilling source
text and serving the local API.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from dnav import __version__
from dnav.config import get_config, with_extraction_overrides
from dnav.extract.models import SourceDocument, Stage

console = Console()
err_console = Console(stderr=True)

SUPPORTED_SUFFIXES = (".pdf", ".txt", ".md", ".markdown")


def setup_logging() -> None:
    """Configure logging with rich output."""
    config = get_config()

    handlers: list[logging.Handler] = [RichHandler(console=err_console, rich_tracebacks=True)]
    if config.logging.file:
        handlers.append(logging.FileHandler(config.logging.file))

    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper()),
        format=config.logging.format,
        handlers=handlers,
    )


def collect_documents(paths: tuple[Path, ...]) -> list[SourceDocument]:
    """Load files, and supported files under directories, as documents.

    Args:
        paths: Files or directories.

    Returns:
        Documents in argument order; directory contents sorted by path.
    """
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(
                sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES)
            )
        else:
            files.append(path)
    return [SourceDocument(name=f.name, data=f.read_bytes()) for f in files]


def _read_memo(memo: str | None, memo_file: Path | None) -> str:
    parts = [memo or ""]
    if memo_file is not None:
        parts.append(memo_file.read_text(encoding="utf-8"))
    return "\n\n".join(part for part in parts if part.strip())


def _print_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        console.print(f"[yellow]![/] {warning}")


@click.group()
@click.version_option(version=__version__, prog_name="dnav")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """D-NAV – decision candidate extraction.

    Finds forward-looking operational commitments in reports and memos.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if verbose:
        get_config().logging.level = "DEBUG"

    setup_logging()


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--memo", default=None, help="Memo text to scan alongside the documents")
@click.option(
    "--memo-file",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read memo text from a file",
)
@click.option("--max-candidates", "-n", default=None, type=click.IntRange(min=1), help="Maximum candidates (default: from config)")
@click.option("--min-score", default=None, type=int, help="Minimum score to keep a segment (default: from config)")
@click.option("--per-page-limit", default=None, type=click.IntRange(min=1), help="Maximum candidates per page (default: from config)")
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
def extract(
    paths: tuple[Path, ...],
    memo: str | None,
    memo_file: Path | None,
    max_candidates: int | None,
    min_score: int | None,
    per_page_limit: int | None,
    output_json: bool,
) -> None:
    """Extract decision candidates from documents.

    PATHS: PDF, text or Markdown files, or directories containing them.
    """
    from dnav.extract.pipeline import extract_decision_candidates

    memo_text = _read_memo(memo, memo_file)
    if not paths and not memo_text:
        raise click.UsageError("Provide at least one path or --memo/--memo-file.")

    config = with_extraction_overrides(
        get_config(),
        max_candidates=max_candidates,
        min_score=min_score,
        per_page_limit=per_page_limit,
    )

    def on_progress(name: str, index: int, total: int) -> None:
        if not output_json:
            console.print(f"[dim][{index}/{total}][/] {name}")

    def on_stage(stage: Stage) -> None:
        logging.getLogger(__name__).debug("Stage: %s", stage.value)

    if not output_json:
        console.print("[bold blue]Extracting decision candidates...[/]\n")

    try:
        result = extract_decision_candidates(
            collect_documents(paths),
            memo_text,
            config=config,
            on_stage=on_stage,
            on_progress=on_progress,
        )
    except Exception as e:
        console.print(f"[red]Error extracting candidates:[/] {e}")
        if get_config().logging.level == "DEBUG":
            console.print_exception()
        sys.exit(1)

    if output_json:
        output = {
            "count": len(result.candidates),
            "candidates": [c.to_dict() for c in result.candidates],
            "warnings": result.warnings,
            "stats": vars(result.stats),
        }
        click.echo(json.dumps(output, indent=2))
        return

    _print_warnings(result.warnings)
    if not result.candidates:
        console.print("[yellow]No decision candidates found.[/]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim", width=3)
    table.add_column("Strength", width=8)
    table.add_column("Category", width=12)
    table.add_column("Title", width=40)
    table.add_column("Source", width=24)
    table.add_column("Score", justify="right", width=5)

    for i, candidate in enumerate(result.candidates, 1):
        strength_color = "green" if candidate.strength == "hard" else "yellow"
        evidence = candidate.evidence
        source = f"{evidence.file_name or '-'} p.{evidence.page}"
        if candidate.duplicates:
            source += f" (+{len(candidate.duplicates)})"
        table.add_row(
            str(i),
            f"[{strength_color}]{candidate.strength}[/]",
            candidate.category.value,
            candidate.title,
            source,
            str(candidate.score),
        )

    console.print(table)
    stats = result.stats
    console.print(
        f"\n[dim]{stats.pages_parsed} pages, {stats.segments} segments, "
        f"{stats.candidates_before_dedupe} → {stats.candidates_after_dedupe} after dedupe[/]"
    )


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--memo", default=None, help="Memo text to include")
@click.option("--max-chunk-chars", default=None, type=click.IntRange(min=100), help="Maximum characters per chunk (default: from config)")
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
def distill(
    paths: tuple[Path, ...],
    memo: str | None,
    max_chunk_chars: int | None,
    output_json: bool,
) -> None:
    """Distill documents into cleaned, page-ranged text chunks.

    PATHS: PDF, text or Markdown files, or directories containing them.
    """
    from dnav.extract.pipeline import distill_sources

    memo_text = memo or ""
    if not paths and not memo_text.strip():
        raise click.UsageError("Provide at least one path or --memo.")

    try:
        result = distill_sources(collect_documents(paths), memo_text, max_chunk_chars=max_chunk_chars)
    except Exception as e:
        console.print(f"[red]Error distilling sources:[/] {e}")
        if get_config().logging.level == "DEBUG":
            console.print_exception()
        sys.exit(1)

    if output_json:
        output = {
            "count": len(result.chunks),
            "chunks": [c.to_dict() for c in result.chunks],
            "warnings": result.warnings,
        }
        click.echo(json.dumps(output, indent=2))
        return

    _print_warnings(result.warnings)
    table = Table(title="Distilled chunks")
    table.add_column("Source", style="cyan")
    table.add_column("Pages", style="green")
    table.add_column("Chars", justify="right")
    for chunk in result.chunks:
        pages = "-" if chunk.page_start is None else f"{chunk.page_start}–{chunk.page_end}"
        table.add_row(chunk.source_id, pages, str(len(chunk.text)))
    console.print(table)


@cli.command()
@click.option(
    "--host",
    default="127.0.0.1",
    help="Host to bind to (default: 127.0.0.1 for local-only)",
)
@click.option(
    "--port",
    "-p",
    default=8080,
    type=int,
    help="Port to listen on (default: 8080)",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload for development",
)
def serve(host: str, port: int, reload: bool) -> None:
    """Start the D-NAV API server.

    The server binds to localhost by default and has no authentication.
    """
    import uvicorn

    if host not in ("127.0.0.1", "localhost"):
        console.print(
            f"[bold yellow]⚠️  Warning:[/] Binding to non-localhost address [cyan]{host}[/]"
        )
        console.print("   This exposes the server to your network. D-NAV has no authentication.")
        console.print()

    console.print("[bold blue]Starting D-NAV API server...[/]")
    console.print(f"  URL: [cyan]http://{host}:{port}[/]")
    console.print(f"  API docs: [cyan]http://{host}:{port}/docs[/]")
    console.print()

    try:
        uvicorn.run(
            "dnav.api.app:create_app",
            host=host,
            port=port,
            reload=reload,
            factory=True,
            log_level="info",
        )
    except KeyboardInterrupt:
        console.print("\n[bold green]Server stopped.[/]")


if __name__ == "__main__":
    cli()
