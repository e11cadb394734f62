"""Data models for device layout profiles and preview pages."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from press_ingest.models.document import Chapter


class PaginationConfig(BaseModel):
    """Layout profile of one device. All lengths are CSS pixels."""

    model_config = ConfigDict(frozen=True)

    page_width: float
    page_height: float
    margin_top: float
    margin_bottom: float
    margin_left: float
    margin_right: float
    font_size: float
    line_height: float  # unitless multiplier

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return self.page_height - self.margin_top - self.margin_bottom

    @property
    def line_height_px(self) -> float:
        return self.font_size * self.line_height


class PageType(str, Enum):
    """Kind of preview page."""

    COVER = "cover"
    TOC = "toc"
    CONTENT = "content"
    BACK_COVER = "back-cover"


class CoverData(BaseModel):
    """Fields shown on the cover page."""

    title: str
    subtitle: str | None = None
    author: str
    image: str | None = None
    color: str = "#0088a0"
    layout: str = "centered"
    font: str = "font-serif"


class TocEntry(BaseModel):
    """Single line of the table of contents page."""

    title: str
    level: int = 1
    page_number: int | None = None


class Page(BaseModel):
    """One emitted preview page."""

    type: PageType
    page_number: int
    html: str | None = None
    cover: CoverData | None = None
    toc: list[TocEntry] = Field(default_factory=list)
    chapter_title: str | None = None
    section_titles: list[str] = Field(default_factory=list)


class BookData(BaseModel):
    """Book fields the preview builder turns into pages."""

    title: str = ""
    subtitle: str | None = None
    author: str = ""
    content: str = ""
    cover_image: str | None = None
    cover_color: str | None = None
    cover_layout: str | None = None
    cover_font: str | None = None
    back_cover_text: str | None = None
    chapters: list[Chapter] = Field(default_factory=list)
