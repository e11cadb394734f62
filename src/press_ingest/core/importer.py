"""Import boundary: validation, source-kind dispatch and PDF fallback cascade."""

import io
import logging
import math
import re
import tempfile
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from press_ingest.core.epub_reader import EpubReader, epub_to_html, extract_body_html
from press_ingest.core.errors import (
    DocumentTooLargeError,
    DocumentTooLongError,
    UnsupportedSourceError,
)
from press_ingest.core.merger import build_structured_chapters
from press_ingest.core.pdf_extractor import extract_pdf_content, extract_pdf_content_basic
from press_ingest.core.text import count_words, html_plain_text
from press_ingest.core.transcoder import html_to_markdown, markdown_to_html
from press_ingest.models.document import (
    DocumentMetadata,
    ImportedDocument,
    PdfExtraction,
    SourceKind,
)
from press_ingest.settings import ImportSettings

log = logging.getLogger(__name__)

DEFAULT_DOCUMENT_TITLE = "Documento sin título"
PLACEHOLDER_WARNING = (
    "No text could be extracted from the document. A placeholder document was created."
)

SUPPORTED_SUFFIXES: dict[str, SourceKind] = {
    ".pdf": SourceKind.PDF,
    ".html": SourceKind.DOCX_HTML,
    ".htm": SourceKind.DOCX_HTML,
    ".xhtml": SourceKind.EPUB,
    ".epub": SourceKind.EPUB,
    ".md": SourceKind.MARKDOWN,
    ".markdown": SourceKind.MARKDOWN,
    ".txt": SourceKind.PLAIN_TEXT,
}

_ATTRIBUTE_RES = [
    re.compile(r"\s+style=\"[^\"]*\"", re.IGNORECASE),
    re.compile(r"\s+lang=\"[^\"]*\"", re.IGNORECASE),
    re.compile(r"\s+data-[\w-]*=\"[^\"]*\"", re.IGNORECASE),
]
_FIRST_TITLE_RE = re.compile(r"<h([12])(?:\s[^>]*)?>([\s\S]*?)</h\1>", re.IGNORECASE)
_HEADING_COUNT_RE = re.compile(r"<h[1-6][\s>]", re.IGNORECASE)
_PARAGRAPH_COUNT_RE = re.compile(r"<p(?:\s[^>]*)?>", re.IGNORECASE)
_OPEN_TAG_RE = re.compile(r"<([A-Za-z][\w-]*)(?:\s[^>]*)?>")
_CLOSE_TAG_RE = re.compile(r"</[A-Za-z][\w-]*\s*>")
_VOID_TAGS = {"br", "hr", "img", "input", "meta", "link", "col", "area", "base", "wbr", "source"}


def detect_kind(path: Path) -> SourceKind:
    """Source kind from the file suffix."""
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedSourceError(suffix or path.name)
    return SUPPORTED_SUFFIXES[suffix]


def resolve_kind(kind: SourceKind | str) -> SourceKind:
    try:
        return SourceKind(kind)
    except ValueError:
        raise UnsupportedSourceError(str(kind)) from None


# =============================================================================
# HTML Helpers
# =============================================================================


def clean_html(html: str) -> str:
    """Drop style, lang and data-* attributes and inter-tag whitespace."""
    for pattern in _ATTRIBUTE_RES:
        html = pattern.sub("", html)
    html = re.sub(r"\n\s*\n", "\n", html)
    html = re.sub(r">\s+<", "><", html)
    return html.strip()


def validate_document(html: str) -> list[str]:
    """Structural warnings for converter HTML. Never fatal."""
    warnings: list[str] = []
    if not _PARAGRAPH_COUNT_RE.search(html):
        warnings.append("No paragraphs found - document may be empty or improperly formatted")
    if not re.search(r"<h[12][\s>]", html, re.IGNORECASE):
        warnings.append("No headings found - consider adding a title to organize content")

    opened = [
        match.group(1)
        for match in _OPEN_TAG_RE.finditer(html)
        if match.group(1).lower() not in _VOID_TAGS and not match.group(0).endswith("/>")
    ]
    if len(opened) != len(_CLOSE_TAG_RE.findall(html)):
        warnings.append("HTML structure may have unmatched tags")
    return warnings


def first_heading_title(html: str) -> str | None:
    match = _FIRST_TITLE_RE.search(html)
    if match:
        return html_plain_text(match.group(2)) or None
    return None


def build_metadata(html: str, words_per_page: int) -> DocumentMetadata:
    """Word, page, heading and paragraph counts of an HTML document."""
    word_count = count_words(html_plain_text(html))
    return DocumentMetadata(
        word_count=word_count,
        estimated_pages=max(1, math.ceil(word_count / words_per_page)),
        heading_count=len(_HEADING_COUNT_RE.findall(html)),
        paragraph_count=len(_PARAGRAPH_COUNT_RE.findall(html)),
    )


def placeholder_markdown(kind: SourceKind, file_name: str, settings: ImportSettings) -> str:
    """Templated document used when nothing could be extracted."""
    return (
        f"# Documento Importado: {file_name}\n\n"
        f"## Formato Detectado\n\n{kind.value.upper()}\n\n"
        "## Nota de Importación\n\n"
        "El documento ha sido procesado, pero no se pudo extraer texto de forma "
        "automática. Puede tratarse de un documento escaneado o basado en imágenes.\n\n"
        "## Recomendaciones\n\n"
        "- Revisa el contenido y copia el texto importante manualmente.\n"
        "- Organiza el contenido en capítulos y secciones.\n\n"
        "## Límites de Importación\n\n"
        f"- Páginas máximas: {settings.max_pages} por documento\n"
        f"- Tamaño máximo: {settings.max_file_size_mb:g}MB por archivo"
    )


# =============================================================================
# PDF Extraction Cascade
# =============================================================================


@dataclass
class ExtractionLayer:
    """Configuration for a PDF extraction layer."""

    name: str
    fn: Callable[[bytes, int], PdfExtraction | None]
    description: str


EXTRACTION_LAYERS: list[ExtractionLayer] = [
    ExtractionLayer(
        name="enhanced",
        fn=extract_pdf_content,
        description="Text operators with heading/list detection",
    ),
    ExtractionLayer(
        name="basic",
        fn=extract_pdf_content_basic,
        description="Text operators as plain paragraphs",
    ),
]


def extract_pdf(data: bytes, words_per_page: int = 250) -> tuple[PdfExtraction, str] | None:
    """Run the extraction layers in order; first non-empty result wins."""
    for layer in EXTRACTION_LAYERS:
        log.info(f"Trying extraction layer: {layer.name} ({layer.description})")

        try:
            result = layer.fn(data, words_per_page)
        except Exception as e:
            log.warning(f"Layer {layer.name} failed with error: {e}")
            continue

        if result is None or not result.markdown.strip():
            log.info(f"  Layer {layer.name}: No results")
            continue

        log.info(f"  Layer {layer.name}: SUCCESS - {result.fragment_count} fragments")
        return result, layer.name

    log.warning("All extraction layers failed. Using placeholder document.")
    return None


# =============================================================================
# Importer
# =============================================================================


@dataclass
class _Converted:
    html: str
    markdown: str
    converter: str
    chapter_html: str | None = None
    chapter_markdown: str | None = None
    title: str | None = None
    author: str | None = None
    created_date: str | None = None
    estimated_pages: int | None = None
    warnings: list[str] = field(default_factory=list)


class DocumentImporter:
    """Turn a buffer of a declared kind into an ``ImportedDocument``."""

    def __init__(self, settings: ImportSettings | None = None):
        self.settings = settings or ImportSettings()

    def import_file(self, path: Path, kind: SourceKind | str | None = None) -> ImportedDocument:
        """Import a file, detecting its kind from the suffix when not given."""
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        source_kind = resolve_kind(kind) if kind else detect_kind(path)
        return self.import_bytes(path.read_bytes(), source_kind, path.name)

    def import_bytes(
        self,
        data: bytes,
        kind: SourceKind | str,
        file_name: str = "documento",
    ) -> ImportedDocument:
        """Import a buffer.

        Raises:
            UnsupportedSourceError: If ``kind`` is not a known source kind
            DocumentTooLargeError: If the buffer exceeds the size ceiling
            DocumentTooLongError: If the estimated page count exceeds the ceiling
        """
        source_kind = resolve_kind(kind)
        if len(data) > self.settings.max_file_size_bytes:
            raise DocumentTooLargeError(len(data), self.settings.max_file_size_mb)

        log.info(f"Importing {file_name} as {source_kind.value} ({len(data):,} bytes)")
        handlers: dict[SourceKind, Callable[[bytes, str], _Converted]] = {
            SourceKind.PDF: self._convert_pdf,
            SourceKind.DOCX_HTML: self._convert_docx_html,
            SourceKind.EPUB: self._convert_epub,
            SourceKind.MARKDOWN: self._convert_text,
            SourceKind.PLAIN_TEXT: self._convert_text,
        }
        converted = handlers[source_kind](data, file_name)

        metadata = build_metadata(converted.html, self.settings.words_per_page)
        if converted.estimated_pages:
            metadata.estimated_pages = converted.estimated_pages
        if metadata.estimated_pages > self.settings.max_pages:
            raise DocumentTooLongError(metadata.estimated_pages, self.settings.max_pages)

        metadata.author = converted.author
        metadata.created_date = converted.created_date
        metadata.source_kind = source_kind
        metadata.converter = converted.converter

        warnings = list(converted.warnings)
        chapters = build_structured_chapters(
            converted.chapter_html, converted.chapter_markdown, warnings
        )

        title = (
            converted.title
            or first_heading_title(converted.html)
            or Path(file_name).stem
            or DEFAULT_DOCUMENT_TITLE
        )
        log.info(
            f"Imported {title!r}: {metadata.word_count} words, "
            f"{len(chapters)} chapters, {len(warnings)} warnings"
        )
        return ImportedDocument(
            title=title,
            content=converted.html,
            markdown=converted.markdown,
            metadata=metadata,
            warnings=warnings,
            chapters=chapters,
        )

    def _placeholder(self, kind: SourceKind, file_name: str, warnings: list[str]) -> _Converted:
        markdown = placeholder_markdown(kind, file_name, self.settings)
        return _Converted(
            html=markdown_to_html(markdown),
            markdown=markdown,
            converter="placeholder",
            chapter_markdown=markdown,
            warnings=[*warnings, PLACEHOLDER_WARNING],
        )

    def _convert_pdf(self, data: bytes, file_name: str) -> _Converted:
        extracted = extract_pdf(data, self.settings.pdf_words_per_page)
        if extracted is None:
            return self._placeholder(SourceKind.PDF, file_name, [])

        result, layer_name = extracted
        return _Converted(
            html=result.html,
            markdown=result.markdown,
            converter=f"pdf-{layer_name}",
            chapter_html=result.html,
            chapter_markdown=result.markdown,
            title=result.metadata.title,
            author=result.metadata.author,
            created_date=result.metadata.created_date,
            estimated_pages=result.estimated_pages,
            warnings=list(result.warnings),
        )

    def _convert_docx_html(self, data: bytes, file_name: str) -> _Converted:
        html = clean_html(_decode_text(data))
        markdown = html_to_markdown(html)
        return _Converted(
            html=html,
            markdown=markdown,
            converter="docx-html",
            chapter_html=html,
            chapter_markdown=markdown,
            warnings=validate_document(html),
        )

    def _convert_epub(self, data: bytes, file_name: str) -> _Converted:
        if not zipfile.is_zipfile(io.BytesIO(data)):
            html = extract_body_html(_decode_text(data))
            markdown = html_to_markdown(html)
            return _Converted(
                html=html,
                markdown=markdown,
                converter="xhtml",
                chapter_html=html,
                chapter_markdown=markdown,
            )

        try:
            with tempfile.TemporaryDirectory() as tmp_dir:
                epub_path = Path(tmp_dir) / (Path(file_name).stem + ".epub")
                epub_path.write_bytes(data)
                parsed = EpubReader(epub_path).parse()
        except Exception as e:
            log.warning(f"EPUB container could not be read: {e}")
            return self._placeholder(
                SourceKind.EPUB, file_name, [f"EPUB container could not be read: {e}"]
            )

        html = epub_to_html(parsed)
        markdown = html_to_markdown(html)
        warnings = []
        if not parsed.sections:
            warnings.append("EPUB contains no readable documents")
        if any(section.has_images for section in parsed.sections):
            warnings.append("EPUB contains images which are not extracted in this import.")
        return _Converted(
            html=html,
            markdown=markdown,
            converter="epub",
            chapter_html=html,
            chapter_markdown=markdown,
            title=parsed.metadata.title,
            author=", ".join(parsed.metadata.authors) or None,
            warnings=warnings,
        )

    def _convert_text(self, data: bytes, file_name: str) -> _Converted:
        markdown = _decode_text(data).replace("\r\n", "\n").strip()
        return _Converted(
            html=markdown_to_html(markdown),
            markdown=markdown,
            converter="markdown",
            chapter_markdown=markdown,
        )


def _decode_text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").lstrip("\ufeff")
