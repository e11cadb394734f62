"""Merge HTML- and Markdown-derived chapter lists into one canonical list."""

import logging

from press_ingest.core.segmenter import (
    extract_chapters_from_html,
    extract_chapters_from_markdown,
    extract_preface_from_html,
    extract_preface_from_markdown,
    markdown_word_count,
    section_title,
)
from press_ingest.core.transcoder import html_to_plain_text, markdown_to_html
from press_ingest.models.document import Chapter

log = logging.getLogger(__name__)


def merge_chapter(
    html_chapter: Chapter | None,
    markdown_chapter: Chapter | None,
    position: int,
    default_level: int = 1,
) -> Chapter:
    """Merge two chapters occupying the same index.

    HTML wins for title, level, html and word count; Markdown wins for the
    markdown body. A side missing in one source is derived from the other.
    """
    title = (
        (html_chapter.title if html_chapter else "")
        or (markdown_chapter.title if markdown_chapter else "")
        or section_title(position)
    )
    if html_chapter is not None:
        level = html_chapter.level
    elif markdown_chapter is not None:
        level = markdown_chapter.level
    else:
        level = default_level

    html_body = html_chapter.html if html_chapter else ""
    markdown_body = markdown_chapter.markdown if markdown_chapter else ""
    if not html_body and markdown_body:
        html_body = markdown_to_html(markdown_body)
    if not markdown_body and html_chapter and html_chapter.html:
        markdown_body = html_to_plain_text(html_chapter.html)

    word_count = (html_chapter.word_count if html_chapter else 0) or (
        markdown_chapter.word_count if markdown_chapter else 0
    )
    if not word_count:
        word_count = markdown_word_count(markdown_body)

    return Chapter(
        title=title,
        level=level,
        html=html_body,
        markdown=markdown_body,
        word_count=word_count,
    )


def build_structured_chapters(
    html: str | None,
    markdown: str | None,
    warnings: list[str] | None = None,
) -> list[Chapter]:
    """Build the canonical chapter list of a document.

    The preface (if any) comes first, followed by ``max(len(html), len(md))``
    chapters aligned by index. Nothing found in either source is dropped.
    When both sources are present and disagree on the chapter count a
    warning is appended to ``warnings``; the index alignment is kept as is.
    """
    if not html and not markdown:
        return []

    html_chapters = extract_chapters_from_html(html)
    markdown_chapters = extract_chapters_from_markdown(markdown)

    chapters: list[Chapter] = []
    html_preface = extract_preface_from_html(html)
    markdown_preface = extract_preface_from_markdown(markdown)
    if html_preface or markdown_preface:
        chapters.append(merge_chapter(html_preface, markdown_preface, 1, default_level=0))

    count = max(len(html_chapters), len(markdown_chapters))
    for index in range(count):
        chapters.append(
            merge_chapter(
                html_chapters[index] if index < len(html_chapters) else None,
                markdown_chapters[index] if index < len(markdown_chapters) else None,
                len(chapters) + 1,
            )
        )

    if html and markdown and len(html_chapters) != len(markdown_chapters):
        message = (
            f"HTML and Markdown chapter counts differ ({len(html_chapters)} vs "
            f"{len(markdown_chapters)}); chapters were aligned by position."
        )
        log.warning(message)
        if warnings is not None:
            warnings.append(message)

    log.info(f"Built {len(chapters)} structured chapters")
    return chapters
