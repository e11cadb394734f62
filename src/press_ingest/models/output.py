"""Data models for files written by the CLI."""

from datetime import datetime

from pydantic import BaseModel, Field

from press_ingest.models.document import DocumentMetadata
from press_ingest.models.pagination import Page


class ChapterMetadata(BaseModel):
    """Metadata accompanying chapter content."""

    chapter_index: int
    title: str
    level: int
    source_path: str
    extracted_at: datetime = Field(default_factory=datetime.now)
    word_count: int
    character_count: int
    paragraph_count: int


class ChapterOutput(BaseModel):
    """One chapter as written to ``chapter_NNN.json``."""

    metadata: ChapterMetadata
    html: str
    markdown: str


class ImportManifest(BaseModel):
    """Document-level manifest written next to the chapter files."""

    title: str
    source_path: str
    source_kind: str
    output_directory: str
    created_at: datetime = Field(default_factory=datetime.now)
    total_chapters: int
    metadata: DocumentMetadata
    chapters: list[ChapterMetadata]
    warnings: list[str] = Field(default_factory=list)


class PreviewOutput(BaseModel):
    """Paginated preview as written to ``pages.json``."""

    title: str
    device: str
    lines_per_page: int
    total_pages: int
    created_at: datetime = Field(default_factory=datetime.now)
    pages: list[Page]
