"""EPUB container reading with ebooklib."""

import logging
import re
import warnings
from pathlib import Path

import ebooklib
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning
from ebooklib import epub

from press_ingest.core.text import count_words, encode_entities
from press_ingest.models.epub import EpubMetadata, EpubSection, ParsedEpub

# Spine documents are XHTML but are read with the HTML parser
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

log = logging.getLogger(__name__)

_CHAPTER_HEADING_RE = re.compile(r"<h[1-3][\s>]", re.IGNORECASE)
_TITLE_TAGS = ("h1", "h2", "h3", "title")


def extract_body_html(content: bytes | str) -> str:
    """Inner markup of ``<body>`` with scripts and styles removed."""
    soup = BeautifulSoup(content, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    if soup.body is None:
        return str(soup).strip()
    return soup.body.decode_contents().strip()


def toc_titles(toc: list) -> dict[str, str]:
    """File name -> first TOC label pointing into that file."""
    titles: dict[str, str] = {}
    pending = list(toc)
    while pending:
        entry = pending.pop(0)
        if isinstance(entry, tuple):
            section, children = entry
            pending[:0] = [section, *children]
            continue
        href = getattr(entry, "href", None)
        label = getattr(entry, "title", None)
        if href and label:
            titles.setdefault(href.split("#", 1)[0], label)
    return titles


def _dc_value(book: epub.EpubBook, field: str) -> str | None:
    entries = book.get_metadata("DC", field)
    if not entries or not entries[0][0]:
        return None
    return str(entries[0][0]).strip() or None


def _is_nav_document(item) -> bool:
    return isinstance(item, epub.EpubNav) or "nav" in (getattr(item, "properties", None) or [])


def _heading_title(soup: BeautifulSoup) -> str | None:
    for name in _TITLE_TAGS:
        element = soup.find(name)
        if element and element.get_text(strip=True):
            return element.get_text(strip=True)
    return None


class EpubReader:
    """Read the metadata and spine documents of one EPUB file."""

    def __init__(self, epub_path: Path):
        self.path = epub_path
        self.book = epub.read_epub(str(epub_path))

    def parse(self) -> ParsedEpub:
        spine = [item_id for item_id, _ in self.book.spine]
        return ParsedEpub(
            metadata=self.read_metadata(),
            sections=self.read_sections(spine),
            spine_order=spine,
        )

    def read_metadata(self) -> EpubMetadata:
        creators = self.book.get_metadata("DC", "creator") or []
        return EpubMetadata(
            title=_dc_value(self.book, "title") or self.path.stem,
            authors=[str(value).strip() for value, _ in creators if value],
            language=_dc_value(self.book, "language"),
            publisher=_dc_value(self.book, "publisher"),
            description=_dc_value(self.book, "description"),
        )

    def documents_in_reading_order(self, spine: list[str]) -> list:
        """Spine documents first, then any document the spine leaves out."""
        documents = [
            item
            for item in self.book.get_items_of_type(ebooklib.ITEM_DOCUMENT)
            if not _is_nav_document(item)
        ]
        rank = {item_id: position for position, item_id in enumerate(spine)}
        return sorted(documents, key=lambda item: rank.get(item.get_id(), len(rank)))

    def read_sections(self, spine: list[str]) -> list[EpubSection]:
        labels = toc_titles(self.book.toc)
        sections: list[EpubSection] = []

        for item in self.documents_in_reading_order(spine):
            raw = item.get_content()
            has_images = b"<img" in raw.lower()
            html = extract_body_html(raw)
            soup = BeautifulSoup(html, "lxml")
            text = soup.get_text(" ", strip=True)
            if not text and not has_images:
                log.info(f"Skipping empty document {item.get_name()}")
                continue

            name = item.get_name()
            sections.append(
                EpubSection(
                    id=item.get_id(),
                    title=labels.get(name) or _heading_title(soup) or Path(name).stem,
                    index=len(sections),
                    file_name=name,
                    html=html,
                    word_count=count_words(text),
                    has_images=has_images,
                )
            )

        log.info(f"Read {len(sections)} documents from {self.path.name}")
        return sections


def epub_to_html(parsed: ParsedEpub) -> str:
    """Concatenate the section bodies into one HTML string.

    A section with no h1-h3 of its own is given an ``<h2>`` with its title,
    so every spine document starts a chapter.
    """
    if not parsed.sections:
        return f"<h1>{encode_entities(parsed.metadata.title)}</h1>"

    parts: list[str] = []
    for section in parsed.sections:
        if not _CHAPTER_HEADING_RE.search(section.html):
            parts.append(f"<h2>{encode_entities(section.title)}</h2>")
        parts.append(section.html)
    return "\n".join(parts)
