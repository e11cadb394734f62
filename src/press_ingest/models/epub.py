"""Data models for EPUB containers."""

from pydantic import BaseModel, Field


class EpubMetadata(BaseModel):
    """Book-level metadata from the OPF package."""

    title: str
    authors: list[str] = Field(default_factory=list)
    language: str | None = None
    publisher: str | None = None
    description: str | None = None


class EpubSection(BaseModel):
    """One spine document."""

    id: str
    title: str
    index: int
    file_name: str
    html: str = ""  # body markup only
    word_count: int = 0
    has_images: bool = False


class ParsedEpub(BaseModel):
    """Complete parsed EPUB structure."""

    metadata: EpubMetadata
    sections: list[EpubSection]
    spine_order: list[str] = Field(default_factory=list)
