"""Split HTML or Markdown into chapters at heading boundaries."""

import logging
import re
from dataclasses import dataclass

from press_ingest.core.text import (
    collapse_whitespace,
    count_words,
    html_plain_text,
    unescape_markdown,
)
from press_ingest.core.transcoder import html_to_plain_text
from press_ingest.models.document import Chapter

log = logging.getLogger(__name__)

DEFAULT_PREFACE_TITLE = "Introducción"
MAX_PREFACE_TITLE_LENGTH = 120
MAX_NUMERIC_HEADING_LENGTH = 100

# Only h1-h3 open chapters; deeper headings stay inside their chapter body
_HTML_HEADING_RE = re.compile(r"<h([1-3])(?:\s[^>]*)?>([\s\S]*?)</h\1\s*>", re.IGNORECASE)
_MD_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})\s+(\S.*)$")
_MD_CLOSING_HASHES_RE = re.compile(r"\s+#+\s*$")
_NUMERIC_HEADING_RE = re.compile(r"^\s*(\d+(?:\.\d+)*)\\?\.\s+(\S.*)$")
_NUMBERED_LINE_RE = re.compile(r"^\s*\d+(?:\.\d+)*(?:\\?\.|\))\s+")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_MD_LINE_MARKUP_RE = re.compile(r"^\s*(?:#{1,6}\s+|>\s*|[-*+]\s+|\d+(?:\.\d+)*[.)]\s+)")
_MD_HEADING_MARKER_RE = re.compile(r"^\s*#{1,6}\s+", re.MULTILINE)


def section_title(index: int) -> str:
    """Synthesized title of the ``index``-th (1-based) untitled chapter."""
    return f"Sección {index}"


def markdown_word_count(markdown: str) -> int:
    """Words of a Markdown body, heading markers excluded."""
    return count_words(_MD_HEADING_MARKER_RE.sub("", markdown))


def _preface_title(text: str) -> str:
    for line in text.splitlines():
        stripped = _MD_LINE_MARKUP_RE.sub("", line)
        stripped = collapse_whitespace(re.sub(r"[*_`]+", "", stripped))
        if stripped:
            if len(stripped) > MAX_PREFACE_TITLE_LENGTH:
                return DEFAULT_PREFACE_TITLE
            return stripped
    return DEFAULT_PREFACE_TITLE


# =============================================================================
# HTML
# =============================================================================


def extract_chapters_from_html(html: str | None) -> list[Chapter]:
    """One chapter per h1-h3 heading, body running to the next heading."""
    if not html or not html.strip():
        return []

    matches = list(_HTML_HEADING_RE.finditer(html))
    chapters: list[Chapter] = []
    for index, match in enumerate(matches):
        end = matches[index + 1].start() if index + 1 < len(matches) else len(html)
        body = html[match.start() : end].strip()
        chapters.append(
            Chapter(
                title=html_plain_text(match.group(2)) or section_title(index + 1),
                level=int(match.group(1)),
                html=body,
                markdown="",
                word_count=count_words(html_plain_text(body)),
            )
        )

    log.info(f"Found {len(chapters)} chapters in HTML")
    return chapters


def extract_preface_from_html(html: str | None) -> Chapter | None:
    """Content before the first h1-h3 heading, if it holds any text."""
    if not html or not html.strip():
        return None

    first = _HTML_HEADING_RE.search(html)
    preface_html = (html[: first.start()] if first else html).strip()
    plain = html_to_plain_text(preface_html)
    if not plain.strip():
        return None

    return Chapter(
        title=_preface_title(plain),
        level=0,
        html=preface_html,
        markdown="",
        word_count=count_words(html_plain_text(preface_html)),
    )


# =============================================================================
# Markdown
# =============================================================================


@dataclass
class _HeadingLine:
    index: int
    level: int
    title: str


def _find_markdown_headings(lines: list[str]) -> list[_HeadingLine]:
    """ATX headings plus numbered headings standing alone after a blank line."""
    headings: list[_HeadingLine] = []
    in_fence = False

    for index, line in enumerate(lines):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue

        atx = _MD_HEADING_RE.match(line)
        if atx:
            title = unescape_markdown(_MD_CLOSING_HASHES_RE.sub("", atx.group(2)).strip())
            headings.append(_HeadingLine(index, len(atx.group(1)), title))
            continue

        numeric = _NUMERIC_HEADING_RE.match(line)
        if numeric and _is_numeric_heading(lines, index):
            depth = numeric.group(1).count(".") + 1
            title = unescape_markdown(numeric.group(2).strip())
            headings.append(_HeadingLine(index, min(depth, 6), title))

    return headings


def _is_numeric_heading(lines: list[str], index: int) -> bool:
    if len(lines[index].strip()) >= MAX_NUMERIC_HEADING_LENGTH:
        return False
    if index > 0 and lines[index - 1].strip():
        return False
    following = next((line for line in lines[index + 1 :] if line.strip()), "")
    # A run of numbered lines is an ordered list
    return not _NUMBERED_LINE_RE.match(following)


def _split_lines(markdown: str) -> list[str]:
    return markdown.replace("\r\n", "\n").split("\n")


def extract_chapters_from_markdown(markdown: str | None) -> list[Chapter]:
    """One chapter per heading line, any level, body up to the next one."""
    if not markdown or not markdown.strip():
        return []

    lines = _split_lines(markdown)
    headings = _find_markdown_headings(lines)
    chapters: list[Chapter] = []
    for position, heading in enumerate(headings):
        end = headings[position + 1].index if position + 1 < len(headings) else len(lines)
        body = "\n".join(lines[heading.index : end]).strip()
        chapters.append(
            Chapter(
                title=heading.title or section_title(position + 1),
                level=heading.level,
                html="",
                markdown=body,
                word_count=markdown_word_count(body),
            )
        )

    log.info(f"Found {len(chapters)} chapters in Markdown")
    return chapters


def extract_preface_from_markdown(markdown: str | None) -> Chapter | None:
    """Content before the first heading line, if it holds any text."""
    if not markdown or not markdown.strip():
        return None

    lines = _split_lines(markdown)
    headings = _find_markdown_headings(lines)
    preface_lines = lines[: headings[0].index] if headings else lines
    body = "\n".join(preface_lines).strip()
    if not body:
        return None

    return Chapter(
        title=_preface_title(unescape_markdown(body)),
        level=0,
        html="",
        markdown=body,
        word_count=markdown_word_count(body),
    )
