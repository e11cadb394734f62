from __future__ import annotations

import re

import pytest

from press_ingest.core.transcoder import (
    HTML_TO_MARKDOWN_STAGES,
    PAGE_BREAK_MARK,
    html_to_markdown,
    html_to_plain_text,
    markdown_to_html,
)

SAMPLE_HTML = (
    "<h1>Título</h1>"
    '<p class="x">Texto &amp; más <strong>fuerte</strong>.</p>'
    "<ul><li>uno</li><li><em>dos</em></li></ul>"
    "<ol><li>primero</li><li>segundo</li></ol>"
    "<blockquote><p>Cita</p></blockquote>"
    "<pre><code>x = 1</code></pre>"
    "<div><span>suelto</span><br/>fin</div>"
)


def test_stage_order() -> None:
    names = [stage.name for stage in HTML_TO_MARKDOWN_STAGES]
    assert names == [
        "blockquote",
        "preformatted",
        "headings",
        "lists",
        "inline",
        "paragraphs",
        "line_breaks",
        "strip_tags",
        "entities",
        "whitespace",
    ]
    assert names.index("headings") < names.index("paragraphs")


@pytest.mark.parametrize("html", [SAMPLE_HTML, "<p>a<p>b", "<div><<x>>", "<b>unclosed", "plain"])
def test_no_tags_remain(html: str) -> None:
    assert not re.search(r"<[A-Za-z/][^>]*>", html_to_markdown(html))


@pytest.mark.parametrize("empty", [None, "", "   "])
def test_empty_input(empty: str | None) -> None:
    assert html_to_markdown(empty) == ""


def test_idempotent_on_own_output() -> None:
    markdown = html_to_markdown(SAMPLE_HTML)
    assert html_to_markdown(markdown) == markdown


def test_heading_wrapped_in_paragraph() -> None:
    assert html_to_markdown("<p><h2>Title</h2></p>") == "## Title"


def test_headings_all_levels() -> None:
    markdown = html_to_markdown("<h1>A</h1><h3>B</h3><h6>C</h6>")
    assert markdown == "# A\n\n### B\n\n###### C"


def test_lists() -> None:
    html = "<ul><li>a</li><li>b</li></ul><ol><li>x</li><li>y</li></ol>"
    assert html_to_markdown(html) == "- a\n- b\n\n1. x\n2. y"


def test_inline_emphasis() -> None:
    html = "<p><strong>bold</strong> <em>it</em> <u>under</u> <code>x</code></p>"
    assert html_to_markdown(html) == "**bold** *it* __under__ `x`"


def test_bold_pattern_does_not_match_br() -> None:
    assert html_to_markdown("<b>x</b><br/>y") == "**x**\ny"
    assert html_to_markdown("<p>a<br>b</p>") == "a\nb"


def test_blockquote_lines_prefixed() -> None:
    html = "<blockquote><p>Quote one</p><p>Quote two</p></blockquote>"
    assert html_to_markdown(html) == "> Quote one\n> Quote two"


def test_preformatted_fenced() -> None:
    html = "<pre><code>x = 1\ny = 2</code></pre>"
    assert html_to_markdown(html) == "```\nx = 1\ny = 2\n```"


def test_entities_decoded_last() -> None:
    assert html_to_markdown("<p>Tom &amp; Jerry &#8212; &lt;3</p>") == "Tom & Jerry — <3"


def test_empty_paragraphs_dropped() -> None:
    assert html_to_markdown("<p></p><p>  </p><p>x</p>") == "x"


def test_markdown_to_html_blocks() -> None:
    html = markdown_to_html("# Title\n\nSome **bold** text.\n\n- a\n- b\n\n1. x\n2. y")
    assert "<h1>Title</h1>" in html
    assert "<p>Some <strong>bold</strong> text.</p>" in html
    assert "<ul>\n<li>a</li>\n<li>b</li>\n</ul>" in html
    assert "<ol>\n<li>x</li>\n<li>y</li>\n</ol>" in html


def test_markdown_to_html_escapes_text() -> None:
    assert markdown_to_html("a < b & c") == "<p>a &lt; b &amp; c</p>"


def test_markdown_to_html_inline() -> None:
    html = markdown_to_html("*it* __u__ `c` [link](http://x.test) ![alt](img.png)")
    assert "<em>it</em>" in html
    assert "<u>u</u>" in html
    assert "<code>c</code>" in html
    assert '<a href="http://x.test">link</a>' in html
    assert '<img src="img.png" alt="alt" />' in html


def test_markdown_to_html_keeps_page_breaks() -> None:
    html = markdown_to_html("one\n\n<!-- page-break -->\n\ntwo")
    assert html == f"<p>one</p>\n{PAGE_BREAK_MARK}\n<p>two</p>"


def test_markdown_to_html_code_and_quote() -> None:
    html = markdown_to_html("> cited\n\n```\n<tag>\n```")
    assert "<blockquote><p>cited</p></blockquote>" in html
    assert "<pre><code>&lt;tag&gt;</code></pre>" in html


def test_markdown_to_html_empty() -> None:
    assert markdown_to_html("") == ""
    assert markdown_to_html(None) == ""


def test_html_to_plain_text() -> None:
    html = "<h1>T</h1><p>Para one</p><ul><li>a</li><li>b</li></ul><p>End</p>"
    assert html_to_plain_text(html) == "T\n\nPara one\n\n- a\n- b\n\nEnd"


def test_html_to_plain_text_drops_scripts() -> None:
    assert html_to_plain_text("<p>x</p><script>var a;</script>") == "x"


def test_html_to_plain_text_nested_list_keeps_parent_item() -> None:
    html = "<ul><li>alpha<ul><li>beta</li></ul></li><li>gamma</li></ul>"
    assert html_to_plain_text(html) == "- alpha\n- beta\n- gamma"


def test_html_to_plain_text_mixed_content_div() -> None:
    html = "<div>Loose intro text<p>para</p>closing words</div>"
    assert html_to_plain_text(html) == "Loose intro text\n\npara\n\nclosing words"


def test_html_to_plain_text_loose_top_level_text() -> None:
    plain = html_to_plain_text("Opening words here<p>x</p>")
    assert plain.startswith("Opening words here")
    assert plain.endswith("x")
    assert html_to_plain_text("solo texto") == "solo texto"


def test_markdown_to_html_backslash_escapes() -> None:
    assert markdown_to_html("\\# not a heading") == "<p># not a heading</p>"
    assert markdown_to_html("\\*literal\\* and \\\\") == "<p>*literal* and \\</p>"
    assert markdown_to_html("1\\. Uno") == "<p>1. Uno</p>"


def test_escaped_tags_surface_after_entity_stage() -> None:
    # Entities are decoded after tags are stripped, so escaped markup becomes
    # literal text and a second pass strips it
    once = html_to_markdown("<p>Use &lt;div&gt; tags</p>")
    assert once == "Use <div> tags"
    assert html_to_markdown(once) == "Use  tags"
