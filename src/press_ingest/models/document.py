"""Data models for imported documents and their chapters."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field


class SourceKind(str, Enum):
    """Declared kind of an incoming document buffer."""

    PDF = "pdf"
    DOCX_HTML = "docx-html"
    EPUB = "epub"
    MARKDOWN = "markdown"
    PLAIN_TEXT = "plain-text"


@dataclass
class TextRun:
    """A decoded string fragment recovered from a PDF content stream."""

    text: str
    font_size: float | None = None
    bold: bool = False
    operator: str = "Tj"


class Chapter(BaseModel):
    """One chapter of the canonical chapter list."""

    title: str
    level: int = Field(default=1, ge=0, le=6)  # 0 = preface / framing page
    html: str = ""
    markdown: str = ""
    word_count: int = 0


class DocumentMetadata(BaseModel):
    """Statistics describing an imported document."""

    word_count: int = 0
    estimated_pages: int = 1
    heading_count: int = 0
    paragraph_count: int = 0
    author: str | None = None
    created_date: str | None = None
    source_kind: SourceKind | None = None
    converter: str | None = None


class ImportedDocument(BaseModel):
    """Complete result of one import call."""

    title: str
    content: str  # HTML
    markdown: str
    metadata: DocumentMetadata
    warnings: list[str] = Field(default_factory=list)
    chapters: list[Chapter] = Field(default_factory=list)


class PdfMetadata(BaseModel):
    """Document information recovered from PDF key/value markers."""

    title: str | None = None
    author: str | None = None
    created_date: str | None = None
    has_images: bool = False


class PdfExtraction(BaseModel):
    """Result of a byte-level PDF text extraction."""

    text: str
    html: str
    markdown: str
    estimated_pages: int = 1
    fragment_count: int = 0
    warnings: list[str] = Field(default_factory=list)
    metadata: PdfMetadata = Field(default_factory=PdfMetadata)
