"""Preview command implementation."""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from press_ingest.core.device_profiles import get_profile
from press_ingest.core.importer import DocumentImporter
from press_ingest.core.output_writer import OutputWriter
from press_ingest.core.paginator import Paginator
from press_ingest.core.preview_builder import build_preview_pages
from press_ingest.models.document import SourceKind
from press_ingest.models.pagination import BookData, Page, PageType
from press_ingest.settings import ImportSettings


def page_summary(page: Page) -> str:
    if page.type == PageType.COVER and page.cover:
        return f"{page.cover.title} / {page.cover.author}"
    if page.type == PageType.TOC:
        return f"{len(page.toc)} entries"
    return ", ".join(page.section_titles) or (page.chapter_title or "")


def display_pages(pages: list[Page], console: Console) -> None:
    table = Table(title="Preview Pages", show_header=True, header_style="bold cyan")
    table.add_column("Page", justify="right", style="dim", width=5)
    table.add_column("Type", style="magenta")
    table.add_column("Chapter", style="white")
    table.add_column("Starts", style="green")

    for page in pages:
        table.add_row(
            str(page.page_number),
            page.type.value,
            page.chapter_title or "",
            page_summary(page),
        )
    console.print(table)


def execute_preview(
    source_path: Path,
    kind: SourceKind | None,
    device: str | None,
    title: str | None,
    author: str | None,
    subtitle: str | None,
    output: Path | None,
    settings: ImportSettings,
    console: Console,
) -> list[Page]:
    """Import a document and lay it out as preview pages for one device."""
    device_name = device or settings.default_device
    config = get_profile(device_name)

    document = DocumentImporter(settings).import_file(source_path, kind)
    book = BookData(
        title=title or document.title,
        subtitle=subtitle,
        author=author or document.metadata.author or "",
        chapters=document.chapters,
        content="" if document.chapters else document.content,
    )
    pages = build_preview_pages(book, config, correction_factor=settings.correction_factor)
    lines_per_page = Paginator(config, correction_factor=settings.correction_factor).lines_per_page

    console.print()
    console.print(
        Panel(
            "\n".join(
                [
                    f"[bold]{book.title}[/]",
                    "",
                    f"[dim]Device:[/] {device_name}",
                    f"[dim]Lines per page:[/] {lines_per_page}",
                    f"[dim]Total pages:[/] {len(pages)}",
                ]
            ),
            title="Preview",
            border_style="green",
        )
    )
    console.print()
    display_pages(pages, console)

    if output is not None:
        writer = OutputWriter(output.parent, source_path)
        path = writer.write_pages(book.title, device_name, lines_per_page, pages, output.name)
        console.print(f"\n[green]✓[/] Pages written to [cyan]{path}[/]")

    return pages
