"""Write imported chapters and preview pages to an output directory."""

from pathlib import Path

from pydantic import BaseModel

from press_ingest.core.transcoder import html_to_plain_text
from press_ingest.models.document import Chapter, ImportedDocument
from press_ingest.models.output import (
    ChapterMetadata,
    ChapterOutput,
    ImportManifest,
    PreviewOutput,
)
from press_ingest.models.pagination import Page

MANIFEST_FILE = "manifest.json"
PAGES_FILE = "pages.json"


def chapter_file_name(index: int) -> str:
    """``chapter_001.json`` for the first (index 0) chapter."""
    return f"chapter_{index + 1:03d}.json"


def get_stats(chapter: Chapter) -> dict[str, int]:
    """Size statistics of a chapter's Markdown body (plain text when it has none)."""
    body = chapter.markdown or html_to_plain_text(chapter.html)
    return {
        "word_count": chapter.word_count,
        "character_count": len(body),
        "paragraph_count": sum(1 for block in body.split("\n\n") if block.strip()),
    }


class OutputWriter:
    """Serializes import and preview results as pretty-printed JSON files."""

    def __init__(self, output_dir: Path, source_path: Path):
        self.output_dir = output_dir
        self.source_path = source_path
        output_dir.mkdir(parents=True, exist_ok=True)

    def _dump(self, name: str, model: BaseModel) -> Path:
        target = self.output_dir / name
        target.write_text(model.model_dump_json(indent=2))
        return target

    def write_chapter(self, chapter: Chapter, index: int) -> tuple[Path, ChapterMetadata]:
        """Write one chapter; ``index`` is its 0-based position in the document."""
        metadata = ChapterMetadata(
            chapter_index=index,
            title=chapter.title,
            level=chapter.level,
            source_path=str(self.source_path),
            **get_stats(chapter),
        )
        document = ChapterOutput(metadata=metadata, html=chapter.html, markdown=chapter.markdown)
        return self._dump(chapter_file_name(index), document), metadata

    def write_manifest(
        self,
        document: ImportedDocument,
        chapter_metadata: list[ChapterMetadata],
    ) -> Path:
        """Document-level summary listing the chapters actually written."""
        kind = document.metadata.source_kind
        manifest = ImportManifest(
            title=document.title,
            source_path=str(self.source_path),
            source_kind=kind.value if kind else "unknown",
            output_directory=str(self.output_dir),
            total_chapters=len(document.chapters),
            metadata=document.metadata,
            chapters=chapter_metadata,
            warnings=document.warnings,
        )
        return self._dump(MANIFEST_FILE, manifest)

    def write_pages(
        self,
        title: str,
        device: str,
        lines_per_page: int,
        pages: list[Page],
        filename: str = PAGES_FILE,
    ) -> Path:
        preview = PreviewOutput(
            title=title,
            device=device,
            lines_per_page=lines_per_page,
            total_pages=len(pages),
            pages=pages,
        )
        return self._dump(filename, preview)
