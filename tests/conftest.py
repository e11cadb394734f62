from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from ebooklib import epub

from press_ingest.models.pagination import PaginationConfig


def _pdf_bytes(body: str, pages: int = 1, trailer: str = "") -> bytes:
    page_objects = "\n".join(
        f"{index + 3} 0 obj << /Type /Page /Parent 2 0 R >> endobj" for index in range(pages)
    )
    document = (
        "%PDF-1.4\n"
        "1 0 obj << /Type /Catalog /Pages 2 0 R >> endobj\n"
        f"2 0 obj << /Type /Pages /Count {pages} >> endobj\n"
        f"{page_objects}\n"
        "10 0 obj << /Length 0 >>\nstream\nBT\n"
        f"{body}\n"
        "ET\nendstream\nendobj\n"
        f"trailer << {trailer} >>\n%%EOF\n"
    )
    return document.encode("latin-1")


@pytest.fixture()
def pdf_factory() -> Callable[..., bytes]:
    """Build a minimal uncompressed PDF buffer around a content stream body."""
    return _pdf_bytes


@pytest.fixture()
def structured_pdf() -> bytes:
    long_line = "Este es un párrafo largo del cuerpo del documento. " * 6
    body = "\n".join(
        [
            "/F1 18 Tf",
            "(INTRODUCTION) Tj",
            "/F2 11 Tf",
            f"({long_line.strip()}) Tj",
            "(- primer punto) Tj",
            "(- segundo punto) Tj",
            "(Chapter 2 Results) Tj",
            "[(Plain) -250 (body) -300 (text)] TJ",
            "(Closing sentence.) Tj",
        ]
    )
    return _pdf_bytes(body, pages=2, trailer="/Info << /Title (Informe Anual) /Author (Ana Ruiz) >>")


@pytest.fixture()
def sample_docx_html() -> str:
    return (
        '<h1 style="color:red">Capítulo Uno</h1>'
        '<p lang="es">Primer párrafo con <strong>negrita</strong>.</p>'
        "<ul><li>Uno</li><li>Dos</li></ul>"
        '<h2 data-id="x">Sección A</h2>'
        "<p>Texto de la sección &amp; más.</p>"
        "<h1>Capítulo Dos</h1>"
        "<p>Final.</p>"
    )


@pytest.fixture()
def sample_markdown() -> str:
    return (
        "Bienvenida al manuscrito\n\n"
        "Incluye resumen breve antes de comenzar.\n\n"
        "# Capítulo Uno\n\n"
        "Este es el primer capítulo.\n\n"
        "## Detalle\n\n"
        "Más texto.\n\n"
        "# Capítulo Dos\n\n"
        "Cierre."
    )


@pytest.fixture()
def epub_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str = "book.epub", title: str = "Libro EPUB") -> Path:
        book = epub.EpubBook()
        book.set_identifier("press-ingest-test")
        book.set_title(title)
        book.set_language("es")
        book.add_author("Autora Prueba")

        first = epub.EpubHtml(title="Primero", file_name="chap_01.xhtml", lang="es")
        first.content = "<html><body><h1>Primero</h1><p>Texto del primer capítulo.</p></body></html>"
        second = epub.EpubHtml(title="Segundo", file_name="chap_02.xhtml", lang="es")
        second.content = "<html><body><p>Texto sin encabezado.</p></body></html>"
        book.add_item(first)
        book.add_item(second)

        book.toc = (epub.Link("chap_01.xhtml", "Primero", "c1"), epub.Link("chap_02.xhtml", "Segundo", "c2"))
        book.add_item(epub.EpubNcx())
        book.add_item(epub.EpubNav())
        book.spine = ["nav", first, second]

        path = tmp_path / filename
        epub.write_epub(str(path), book)
        return path

    return _create


@pytest.fixture()
def laptop_config() -> PaginationConfig:
    return PaginationConfig(
        page_width=576,
        page_height=864,
        margin_top=72,
        margin_bottom=72,
        margin_left=72,
        margin_right=72,
        font_size=16,
        line_height=1.6,
    )
