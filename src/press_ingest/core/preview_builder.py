"""Assemble the full preview page sequence of a book."""

import logging
import re

from press_ingest.core.paginator import (
    DEFAULT_CORRECTION_FACTOR,
    LineEstimator,
    Paginator,
    looks_like_html,
)
from press_ingest.core.text import collapse_whitespace, encode_entities
from press_ingest.core.transcoder import markdown_to_html
from press_ingest.models.document import Chapter
from press_ingest.models.pagination import (
    BookData,
    CoverData,
    Page,
    PageType,
    PaginationConfig,
    TocEntry,
)

log = logging.getLogger(__name__)

DEFAULT_TITLE = "Libro sin título"
DEFAULT_AUTHOR = "Autor desconocido"
DEFAULT_COVER_COLOR = "#0088a0"
DEFAULT_COVER_LAYOUT = "centered"
DEFAULT_COVER_FONT = "font-serif"
MISSING_CHAPTER_HTML = "<p><em>Contenido aún no disponible</em></p>"
NO_CONTENT_HTML = "<p><em>Todavía no hay contenido para previsualizar.</em></p>"
TOC_MAX_LEVEL = 2

_HEADING_TAG_RE = re.compile(r"<h[1-6][\s>]", re.IGNORECASE)


def _to_html(content: str) -> str:
    content = content.strip()
    if not content:
        return ""
    return content if looks_like_html(content) else markdown_to_html(content)


def chapter_html(chapter: Chapter, position: int) -> str:
    """Chapter body as HTML, always opening with a heading."""
    title = chapter.title.strip() or f"Capítulo {position}"
    body = _to_html(chapter.html) or _to_html(chapter.markdown)
    if not body:
        return f"<h2>{encode_entities(title)}</h2>\n{MISSING_CHAPTER_HTML}"
    if not _HEADING_TAG_RE.search(body):
        return f"<h2>{encode_entities(title)}</h2>\n{body}"
    return body


def build_cover(book: BookData) -> CoverData:
    return CoverData(
        title=book.title.strip() or DEFAULT_TITLE,
        subtitle=book.subtitle or None,
        author=book.author.strip() or DEFAULT_AUTHOR,
        image=book.cover_image,
        color=book.cover_color or DEFAULT_COVER_COLOR,
        layout=book.cover_layout or DEFAULT_COVER_LAYOUT,
        font=book.cover_font or DEFAULT_COVER_FONT,
    )


def build_book_html(book: BookData) -> str:
    """Manuscript content followed by every chapter, as one HTML string."""
    parts: list[str] = []
    manuscript = _to_html(book.content)
    if manuscript:
        parts.append(manuscript)
    for position, chapter in enumerate(book.chapters, start=1):
        parts.append(chapter_html(chapter, position))
    return "\n".join(parts) or NO_CONTENT_HTML


def _locate_titles(titles: list[str], content_pages: list[Page]) -> list[int | None]:
    """Page number where each title starts, searching forward in order."""
    located: list[int | None] = []
    cursor = 0
    for title in titles:
        wanted = collapse_whitespace(title)
        found = None
        for index in range(cursor, len(content_pages)):
            if wanted in content_pages[index].section_titles:
                found = content_pages[index].page_number
                cursor = index
                break
        located.append(found)
    return located


def build_toc(book: BookData, content_pages: list[Page]) -> list[TocEntry]:
    """TOC entries for chapters up to level 2, or for headings when none."""
    if book.chapters:
        listed = [
            (chapter.title.strip() or f"Capítulo {position}", chapter.level)
            for position, chapter in enumerate(book.chapters, start=1)
            if chapter.level <= TOC_MAX_LEVEL
        ]
    else:
        listed = [(title, 1) for page in content_pages for title in page.section_titles]

    numbers = _locate_titles([title for title, _ in listed], content_pages)
    return [
        TocEntry(title=title, level=max(level, 1), page_number=number)
        for (title, level), number in zip(listed, numbers)
    ]


def build_back_cover_html(book: BookData) -> str:
    if book.back_cover_text and book.back_cover_text.strip():
        return _to_html(book.back_cover_text)
    title = encode_entities(book.title.strip() or DEFAULT_TITLE)
    author = encode_entities(book.author.strip() or DEFAULT_AUTHOR)
    return f"<h2>{title}</h2>\n<p>{author}</p>"


def build_preview_pages(
    book: BookData,
    config: PaginationConfig,
    estimator: LineEstimator | None = None,
    correction_factor: float = DEFAULT_CORRECTION_FACTOR,
) -> list[Page]:
    """Cover, table of contents, content pages and back cover, numbered 1..N."""
    paginator = Paginator(config, estimator=estimator, correction_factor=correction_factor)
    content_pages = paginator.paginate(build_book_html(book), start_page=3)

    pages = [
        Page(type=PageType.COVER, page_number=1, cover=build_cover(book)),
        Page(type=PageType.TOC, page_number=2, toc=build_toc(book, content_pages)),
        *content_pages,
    ]
    pages.append(
        Page(
            type=PageType.BACK_COVER,
            page_number=len(pages) + 1,
            html=build_back_cover_html(book),
        )
    )

    log.info(f"Built preview with {len(pages)} pages")
    return pages
