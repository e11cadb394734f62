"""Data models."""

from press_ingest.models.document import (
    Chapter,
    DocumentMetadata,
    ImportedDocument,
    PdfExtraction,
    PdfMetadata,
    SourceKind,
    TextRun,
)
from press_ingest.models.epub import (
    EpubMetadata,
    EpubSection,
    ParsedEpub,
)
from press_ingest.models.output import (
    ChapterMetadata,
    ChapterOutput,
    ImportManifest,
    PreviewOutput,
)
from press_ingest.models.pagination import (
    BookData,
    CoverData,
    Page,
    PageType,
    PaginationConfig,
    TocEntry,
)

__all__ = [
    # Document models
    "SourceKind",
    "TextRun",
    "Chapter",
    "DocumentMetadata",
    "ImportedDocument",
    "PdfMetadata",
    "PdfExtraction",
    # EPUB models
    "EpubMetadata",
    "EpubSection",
    "ParsedEpub",
    # Pagination models
    "PaginationConfig",
    "PageType",
    "CoverData",
    "TocEntry",
    "Page",
    "BookData",
    # Output models
    "ChapterMetadata",
    "ChapterOutput",
    "ImportManifest",
    "PreviewOutput",
]
