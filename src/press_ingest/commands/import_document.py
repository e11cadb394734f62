"""Import command implementation."""

import re
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from press_ingest.core.importer import DocumentImporter
from press_ingest.core.output_writer import OutputWriter
from press_ingest.models.document import Chapter, ImportedDocument, SourceKind
from press_ingest.settings import ImportSettings


_SELECTION_ITEM_RE = re.compile(r"^(\d+)(?:\s*-\s*(\d+))?$")


def parse_chapter_selection(selection: str, total_chapters: int) -> list[int]:
    """Turn a 1-based selection like ``"1,3,5-7"`` or ``"all"`` into 0-based indices.

    Unparseable items and numbers outside the chapter list are ignored.
    """
    if selection.strip().lower() == "all":
        return list(range(total_chapters))

    chosen: set[int] = set()
    for item in selection.split(","):
        match = _SELECTION_ITEM_RE.match(item.strip())
        if not match:
            continue
        first = int(match.group(1))
        last = int(match.group(2) or first)
        chosen.update(range(first - 1, last))

    return sorted(index for index in chosen if 0 <= index < total_chapters)


def get_default_output_dir(source_path: Path) -> Path:
    """Get default output directory based on the source filename."""
    clean_stem = re.sub(r"[^\w\s-]", "", source_path.stem).strip()
    clean_stem = re.sub(r"[-\s]+", "_", clean_stem)
    return source_path.parent / f"{clean_stem}_chapters"


def display_chapters(chapters: list[Chapter], console: Console) -> None:
    """Display the canonical chapter list."""
    table = Table(title="Chapters", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="white")
    table.add_column("Level", justify="right", style="dim")
    table.add_column("Words", justify="right", style="green")

    for i, chapter in enumerate(chapters):
        indent = "  " * max(chapter.level - 1, 0)
        table.add_row(str(i + 1), f"{indent}{chapter.title}", str(chapter.level), f"{chapter.word_count:,}")

    console.print(table)


def document_info_lines(document: ImportedDocument) -> list[str]:
    """Rich markup lines describing an imported document."""
    metadata = document.metadata
    kind = metadata.source_kind.value if metadata.source_kind else "unknown"
    info_lines = [
        f"[bold]{document.title}[/]",
        "",
        f"[dim]Author:[/] {metadata.author or 'Unknown'}",
        f"[dim]Format:[/] {kind.upper()}",
        f"[dim]Converter:[/] {metadata.converter or 'Unknown'}",
        f"[dim]Words:[/] {metadata.word_count:,}",
        f"[dim]Estimated pages:[/] {metadata.estimated_pages}",
        f"[dim]Headings / paragraphs:[/] {metadata.heading_count} / {metadata.paragraph_count}",
        f"[dim]Chapters:[/] {len(document.chapters)}",
    ]
    if metadata.created_date:
        info_lines.append(f"[dim]Created:[/] {metadata.created_date}")

    if document.warnings:
        info_lines.append("")
        for warning in document.warnings:
            info_lines.append(f"[yellow]⚠ {warning}[/]")
    return info_lines


def load_document(
    source_path: Path,
    kind: SourceKind | None,
    settings: ImportSettings,
    quiet: bool,
    console: Console,
) -> ImportedDocument:
    importer = DocumentImporter(settings)
    if quiet:
        return importer.import_file(source_path, kind)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Importing {source_path.name}...", total=None)
        return importer.import_file(source_path, kind)


def execute_import(
    source_path: Path,
    kind: SourceKind | None,
    chapters: str | None,
    output_dir: Path | None,
    quiet: bool,
    settings: ImportSettings,
    console: Console,
) -> Path | None:
    """Execute the import command. Returns the manifest path."""
    document = load_document(source_path, kind, settings, quiet, console)

    if not quiet:
        console.print()
        console.print(
            Panel(
                "\n".join(document_info_lines(document)),
                title="Document Info",
                border_style="green",
            )
        )
        console.print()

    if not document.chapters:
        console.print("[yellow]No chapters found. Nothing to write.[/]")
        return None

    selected_indices = parse_chapter_selection(chapters or "all", len(document.chapters))
    if not selected_indices:
        console.print("[yellow]No chapters selected. Exiting.[/]")
        return None

    final_output_dir = output_dir or get_default_output_dir(source_path)
    writer = OutputWriter(final_output_dir, source_path)
    chapter_metadata = []

    if not quiet:
        with Progress(console=console) as progress:
            task = progress.add_task("Writing chapters...", total=len(selected_indices))
            for idx in selected_indices:
                chapter = document.chapters[idx]
                _, metadata = writer.write_chapter(chapter, idx)
                chapter_metadata.append(metadata)
                progress.update(task, advance=1, description=f"Writing: {chapter.title[:40]}...")
    else:
        for idx in selected_indices:
            _, metadata = writer.write_chapter(document.chapters[idx], idx)
            chapter_metadata.append(metadata)

    manifest_path = writer.write_manifest(document, chapter_metadata)

    if not quiet:
        console.print()
        console.print(
            f"[green]✓[/] Wrote {len(chapter_metadata)} chapter(s) to [cyan]{final_output_dir}[/]"
        )
        console.print(f"[dim]Manifest: {manifest_path}[/]")

    return manifest_path
