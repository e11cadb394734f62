from __future__ import annotations

from pathlib import Path

from press_ingest.core.output_writer import OutputWriter, get_stats
from press_ingest.models.document import Chapter, DocumentMetadata, ImportedDocument, SourceKind
from press_ingest.models.output import ChapterOutput, ImportManifest, PreviewOutput
from press_ingest.models.pagination import Page, PageType


def _chapter() -> Chapter:
    return Chapter(
        title="Uno",
        level=1,
        html="<h1>Uno</h1><p>a b</p>",
        markdown="# Uno\n\na b",
        word_count=3,
    )


def test_get_stats() -> None:
    assert get_stats(_chapter()) == {
        "word_count": 3,
        "character_count": 10,
        "paragraph_count": 2,
    }


def test_get_stats_falls_back_to_html() -> None:
    stats = get_stats(Chapter(title="X", html="<p>uno</p><p>dos</p>", word_count=2))
    assert stats["paragraph_count"] == 2


def test_write_chapter(tmp_path: Path) -> None:
    writer = OutputWriter(tmp_path / "out", Path("libro.md"))
    path, metadata = writer.write_chapter(_chapter(), 0)

    assert path.name == "chapter_001.json"
    assert metadata.chapter_index == 0
    saved = ChapterOutput.model_validate_json(path.read_text())
    assert saved.metadata.title == "Uno"
    assert saved.markdown == "# Uno\n\na b"


def test_write_manifest(tmp_path: Path) -> None:
    writer = OutputWriter(tmp_path, Path("libro.md"))
    document = ImportedDocument(
        title="Libro",
        content="<h1>Uno</h1>",
        markdown="# Uno",
        metadata=DocumentMetadata(source_kind=SourceKind.MARKDOWN),
        warnings=["aviso"],
        chapters=[_chapter(), _chapter()],
    )
    _, metadata = writer.write_chapter(document.chapters[1], 1)
    path = writer.write_manifest(document, [metadata])

    manifest = ImportManifest.model_validate_json(path.read_text())
    assert manifest.source_kind == "markdown"
    assert manifest.total_chapters == 2
    assert [c.chapter_index for c in manifest.chapters] == [1]
    assert manifest.warnings == ["aviso"]
    assert (tmp_path / "chapter_002.json").exists()


def test_write_pages(tmp_path: Path) -> None:
    writer = OutputWriter(tmp_path, Path("libro.md"))
    pages = [Page(type=PageType.CONTENT, page_number=1, html="<p>x</p>")]
    path = writer.write_pages("Libro", "tablet", 22, pages, "vista.json")

    assert path == tmp_path / "vista.json"
    preview = PreviewOutput.model_validate_json(path.read_text())
    assert preview.total_pages == 1
    assert preview.pages[0].type == PageType.CONTENT
