"""Command-line entry point for press-ingest."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from press_ingest.commands.import_document import (
    display_chapters,
    document_info_lines,
    execute_import,
)
from press_ingest.commands.preview import execute_preview
from press_ingest.core.device_profiles import (
    DEVICE_LABELS,
    DEVICE_PROFILES,
)
from press_ingest.core.errors import PressIngestError
from press_ingest.core.importer import DocumentImporter
from press_ingest.core.paginator import Paginator
from press_ingest.models.document import SourceKind
from press_ingest.settings import load_settings

app = typer.Typer(
    name="press-ingest",
    help="Import PDF, DOCX-HTML, EPUB and Markdown documents into chapters and preview pages.",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show pipeline progress logs"),
    ] = False,
) -> None:
    """Import documents into chapters and paginate them for preview devices."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


SourceArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to the document (PDF, HTML, XHTML, EPUB, Markdown or text)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
KindOption = Annotated[
    Optional[SourceKind],
    typer.Option(
        "--kind", "-k",
        help="Source kind (default: detected from the file suffix)",
        case_sensitive=False,
    ),
]


@app.command("import")
def import_command(
    source_path: SourceArgument,
    kind: KindOption = None,
    chapters: Annotated[
        Optional[str],
        typer.Option(
            "--chapters", "-c",
            help="Chapters to write: '1,3,5-7' or 'all' (default: all)",
        ),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--output-dir", "-o",
            help="Output directory (default: <name>_chapters/ next to the source)",
        ),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Minimal output"),
    ] = False,
) -> None:
    """Import a document and write its chapters as JSON files plus a manifest."""
    try:
        execute_import(
            source_path=source_path,
            kind=kind,
            chapters=chapters,
            output_dir=output_dir,
            quiet=quiet,
            settings=load_settings(),
            console=console,
        )
    except PressIngestError as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


@app.command()
def info(
    source_path: SourceArgument,
    kind: KindOption = None,
) -> None:
    """Display document metadata, warnings and the chapter list."""
    try:
        document = DocumentImporter(load_settings()).import_file(source_path, kind)
    except PressIngestError as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)

    console.print()
    console.print(
        Panel(
            "\n".join(document_info_lines(document)),
            title="Document Information",
            border_style="green",
        )
    )
    console.print()
    display_chapters(document.chapters, console)
    console.print()


@app.command()
def preview(
    source_path: SourceArgument,
    kind: KindOption = None,
    device: Annotated[
        Optional[str],
        typer.Option("--device", "-d", help="Device profile (see 'devices')"),
    ] = None,
    title: Annotated[
        Optional[str],
        typer.Option("--title", help="Book title (default: document title)"),
    ] = None,
    author: Annotated[
        Optional[str],
        typer.Option("--author", "-a", help="Author shown on the cover"),
    ] = None,
    subtitle: Annotated[
        Optional[str],
        typer.Option("--subtitle", help="Subtitle shown on the cover"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the pages to this JSON file"),
    ] = None,
) -> None:
    """Paginate a document for a preview device."""
    try:
        execute_preview(
            source_path=source_path,
            kind=kind,
            device=device,
            title=title,
            author=author,
            subtitle=subtitle,
            output=output,
            settings=load_settings(),
            console=console,
        )
    except PressIngestError as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


@app.command()
def devices() -> None:
    """List the available device profiles."""
    settings = load_settings()
    table = Table(title="Device Profiles", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Label", style="white")
    table.add_column("Page (px)", justify="right")
    table.add_column("Margins (px)", justify="right", style="dim")
    table.add_column("Font", justify="right")
    table.add_column("Lines/page", justify="right", style="green")

    for name, config in DEVICE_PROFILES.items():
        lines = Paginator(config, correction_factor=settings.correction_factor).lines_per_page
        table.add_row(
            name,
            DEVICE_LABELS.get(name, name),
            f"{config.page_width:g}×{config.page_height:g}",
            f"{config.margin_top:g}/{config.margin_right:g}/"
            f"{config.margin_bottom:g}/{config.margin_left:g}",
            f"{config.font_size:g}px × {config.line_height:g}",
            str(lines),
        )

    console.print(table)


if __name__ == "__main__":
    app()
