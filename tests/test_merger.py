from __future__ import annotations

from press_ingest.core.merger import build_structured_chapters, merge_chapter
from press_ingest.core.segmenter import markdown_word_count
from press_ingest.core.transcoder import html_to_markdown
from press_ingest.models.document import Chapter


def test_both_sources_agree(sample_docx_html: str) -> None:
    warnings: list[str] = []
    chapters = build_structured_chapters(
        sample_docx_html, html_to_markdown(sample_docx_html), warnings
    )
    assert [(c.title, c.level) for c in chapters] == [
        ("Capítulo Uno", 1),
        ("Sección A", 2),
        ("Capítulo Dos", 1),
    ]
    assert chapters[0].html.startswith('<h1 style="color:red">Capítulo Uno</h1>')
    assert chapters[0].markdown.startswith("# Capítulo Uno")
    assert chapters[1].markdown == "## Sección A\n\nTexto de la sección & más."
    assert all(c.word_count > 0 for c in chapters)
    assert warnings == []


def test_length_is_preface_plus_longest_source() -> None:
    html = "<p>Prefacio</p><h1>A</h1><p>a</p><h1>B</h1><p>b</p>"
    markdown = "# A\n\na\n\n# B\n\nb\n\n# C\n\nc"
    warnings: list[str] = []
    chapters = build_structured_chapters(html, markdown, warnings)

    assert [(c.title, c.level) for c in chapters] == [
        ("Prefacio", 0),
        ("A", 1),
        ("B", 1),
        ("C", 1),
    ]
    assert chapters[0].markdown == "Prefacio"
    assert chapters[3].html == "<h1>C</h1>\n<p>c</p>"
    assert chapters[3].word_count == 2
    assert len(warnings) == 1
    assert "(2 vs 3)" in warnings[0]


def test_markdown_only_document() -> None:
    chapters = build_structured_chapters(None, "Intro text\n\n1. Capítulo Uno\nBody.")
    assert [(c.title, c.level) for c in chapters] == [
        ("Intro text", 0),
        ("Capítulo Uno", 1),
    ]
    assert chapters[0].html == "<p>Intro text</p>"
    assert "Capítulo Uno" not in chapters[0].markdown
    assert chapters[1].html


def test_html_only_document() -> None:
    chapters = build_structured_chapters("<h1>A</h1><p>uno dos</p>", None)
    assert len(chapters) == 1
    assert chapters[0].markdown == "A\n\nuno dos"
    assert chapters[0].word_count == 3


def test_html_only_body_keeps_mixed_content() -> None:
    chapters = build_structured_chapters("<h1>A</h1><div>kept words<p>x</p></div>", None)
    assert chapters[0].markdown == "A\n\nkept words\n\nx"
    assert chapters[0].word_count == markdown_word_count(chapters[0].markdown) == 4


def test_nothing_to_merge() -> None:
    assert build_structured_chapters(None, None) == []
    assert build_structured_chapters("", "") == []


def test_no_headings_gives_single_preface() -> None:
    chapters = build_structured_chapters(None, "Solo un párrafo sin títulos.")
    assert len(chapters) == 1
    assert chapters[0].level == 0
    assert chapters[0].title == "Solo un párrafo sin títulos."


def test_merge_chapter_fallbacks() -> None:
    merged = merge_chapter(None, None, 4)
    assert merged.title == "Sección 4"
    assert merged.level == 1
    assert merged.html == ""
    assert merged.word_count == 0


def test_merge_chapter_recounts_words() -> None:
    merged = merge_chapter(
        Chapter(title="X", html="<p></p>", word_count=0),
        Chapter(title="Y", markdown="uno dos tres", word_count=0),
        1,
    )
    assert merged.title == "X"
    assert merged.html == "<p></p>"
    assert merged.markdown == "uno dos tres"
    assert merged.word_count == 3
