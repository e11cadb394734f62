"""HTML <-> Markdown transcoding as an ordered rewrite pipeline."""

import logging
import re
import warnings
from dataclasses import dataclass
from typing import Callable

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning
from bs4.element import PreformattedString, Tag

from press_ingest.core.text import (
    MARKDOWN_ESCAPE_RE,
    collapse_whitespace,
    decode_entities,
    encode_entities,
    strip_tags,
)

# Short plain-text fragments look like file names to BeautifulSoup
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

log = logging.getLogger(__name__)

PAGE_BREAK_MARK = "<!-- page-break -->"
PAGE_BREAK_RE = re.compile(r"<!--\s*page-break\s*-->", re.IGNORECASE)


# =============================================================================
# Rewrite Stage Configuration
# =============================================================================


@dataclass(frozen=True)
class RewriteStage:
    """One named string transform of the HTML -> Markdown pipeline."""

    name: str
    apply: Callable[[str], str]
    description: str


def _tag(name: str) -> str:
    """Opening-tag pattern that matches ``name`` exactly (``b`` never matches ``br``)."""
    return rf"<{name}(?:\s[^>]*)?>"


_BLOCK_BREAK_RE = re.compile(r"</(?:p|div|h[1-6]|li)>|<br\s*/?>", re.IGNORECASE)
_BLOCKQUOTE_RE = re.compile(
    _tag("blockquote") + r"([\s\S]*?)</blockquote>", re.IGNORECASE
)
_PRE_RE = re.compile(_tag("pre") + r"([\s\S]*?)</pre>", re.IGNORECASE)
_HEADING_RE = re.compile(r"<h([1-6])(?:\s[^>]*)?>([\s\S]*?)</h\1>", re.IGNORECASE)
# Innermost lists only, so nested lists are rewritten inside-out
_LIST_RE = re.compile(
    r"<(ul|ol)(?:\s[^>]*)?>((?:(?!<(?:ul|ol)[\s>])[\s\S])*?)</\1>", re.IGNORECASE
)
_LIST_ITEM_RE = re.compile(_tag("li") + r"([\s\S]*?)</li>", re.IGNORECASE)
_BOLD_RE = re.compile(r"<(strong|b)(?:\s[^>]*)?>([\s\S]*?)</\1>", re.IGNORECASE)
_ITALIC_RE = re.compile(r"<(em|i)(?:\s[^>]*)?>([\s\S]*?)</\1>", re.IGNORECASE)
_UNDERLINE_RE = re.compile(_tag("u") + r"([\s\S]*?)</u>", re.IGNORECASE)
_CODE_RE = re.compile(_tag("code") + r"([^<]*)</code>", re.IGNORECASE)
_PARAGRAPH_RE = re.compile(_tag("p") + r"([\s\S]*?)</p>", re.IGNORECASE)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_SCRIPT_RE = re.compile(r"<(script|style)(?:\s[^>]*)?>[\s\S]*?</\1>", re.IGNORECASE)


def _rewrite_blockquotes(html: str) -> str:
    def replace(match: re.Match) -> str:
        inner = strip_tags(_BLOCK_BREAK_RE.sub("\n", match.group(1)))
        lines = [f"> {line.strip()}" for line in inner.split("\n") if line.strip()]
        return "\n" + "\n".join(lines) + "\n\n" if lines else ""

    return _BLOCKQUOTE_RE.sub(replace, html)


def _rewrite_preformatted(html: str) -> str:
    def replace(match: re.Match) -> str:
        code = strip_tags(match.group(1)).strip("\n")
        return f"\n```\n{code}\n```\n\n"

    return _PRE_RE.sub(replace, html)


def _rewrite_headings(html: str) -> str:
    def replace(match: re.Match) -> str:
        text = collapse_whitespace(strip_tags(match.group(2)))
        if not text:
            return ""
        return f"\n{'#' * int(match.group(1))} {text}\n\n"

    return _HEADING_RE.sub(replace, html)


def _rewrite_lists(html: str) -> str:
    def replace(match: re.Match) -> str:
        ordered = match.group(1).lower() == "ol"
        items = [
            collapse_whitespace(strip_tags(item))
            for item in _LIST_ITEM_RE.findall(match.group(2))
        ]
        lines = [
            f"{index}. {text}" if ordered else f"- {text}"
            for index, text in enumerate(items, start=1)
        ]
        return "\n" + "\n".join(lines) + "\n\n" if lines else ""

    # Each pass rewrites the innermost lists; bounded for malformed input
    for _ in range(16):
        rewritten = _LIST_RE.sub(replace, html)
        if rewritten == html:
            break
        html = rewritten
    return html


def _rewrite_inline(html: str) -> str:
    html = _BOLD_RE.sub(lambda m: f"**{m.group(2)}**", html)
    html = _ITALIC_RE.sub(lambda m: f"*{m.group(2)}*", html)
    html = _UNDERLINE_RE.sub(r"__\1__", html)
    html = _CODE_RE.sub(r"`\1`", html)
    return html


def _rewrite_paragraphs(html: str) -> str:
    def replace(match: re.Match) -> str:
        text = strip_tags(_BR_RE.sub("\n", match.group(1))).strip()
        return f"{text}\n\n" if text else ""

    return _PARAGRAPH_RE.sub(replace, html)


def _rewrite_line_breaks(html: str) -> str:
    return _BR_RE.sub("\n", html)


def _strip_remaining_tags(html: str) -> str:
    return strip_tags(_SCRIPT_RE.sub("", html))


def _normalize_newlines(text: str) -> str:
    text = re.sub(r"[ \t]+\n", "\n", text.replace("\r\n", "\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


# Order matters: headings must be rewritten before paragraphs, otherwise a
# heading wrapped in <p> is flattened into body text.
HTML_TO_MARKDOWN_STAGES: tuple[RewriteStage, ...] = (
    RewriteStage("blockquote", _rewrite_blockquotes, "Quote lines prefixed with '> '"),
    RewriteStage("preformatted", _rewrite_preformatted, "<pre> to fenced code"),
    RewriteStage("headings", _rewrite_headings, "<h1>-<h6> to ATX headings"),
    RewriteStage("lists", _rewrite_lists, "<ul>/<ol> items to '- ' / 'N. '"),
    RewriteStage("inline", _rewrite_inline, "Bold, italic, underline, code"),
    RewriteStage("paragraphs", _rewrite_paragraphs, "<p> to blank-line paragraphs"),
    RewriteStage("line_breaks", _rewrite_line_breaks, "<br> to newline"),
    RewriteStage("strip_tags", _strip_remaining_tags, "Drop any remaining tag"),
    RewriteStage("entities", decode_entities, "Decode HTML entities"),
    RewriteStage("whitespace", _normalize_newlines, "Collapse blank lines, trim"),
)


def html_to_markdown(html: str | None) -> str:
    """Convert HTML to Markdown by running every stage in order.

    Never raises; ``None`` and empty input produce an empty string.
    Running it again on its own output only normalizes whitespace, except
    for entity-escaped markup (``&lt;div&gt;``), which the entity stage turns
    into literal tags.
    """
    if not html:
        return ""
    text = html
    for stage in HTML_TO_MARKDOWN_STAGES:
        text = stage.apply(text)
    return text


# =============================================================================
# Markdown -> HTML
# =============================================================================

_MD_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*#*$")
_MD_UNORDERED_RE = re.compile(r"^[-*+]\s+(.*)$")
_MD_ORDERED_RE = re.compile(r"^\d+[.)]\s+(.*)$")
_MD_IMAGE_LINE_RE = re.compile(r"^!\[([^\]]*)\]\(([^)\s]+)\)$")


def render_inline_markdown(text: str) -> str:
    """Escape text and render inline emphasis, code, images and links.

    Backslash-escaped characters are emitted literally and never start markup.
    """
    held: list[str] = []

    def hold(match: re.Match) -> str:
        held.append(match.group(1))
        return f"\x00{len(held) - 1}\x00"

    result = encode_entities(MARKDOWN_ESCAPE_RE.sub(hold, text))
    result = re.sub(r"`([^`]+)`", r"<code>\1</code>", result)
    result = re.sub(
        r"!\[([^\]]*)\]\(([^)\s]+)\)", r'<img src="\2" alt="\1" />', result
    )
    result = re.sub(r"\[([^\]]+)\]\(([^)\s]+)\)", r'<a href="\2">\1</a>', result)
    result = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", result)
    result = re.sub(r"__(.+?)__", r"<u>\1</u>", result)
    result = re.sub(r"(?<![*\w])\*(?!\s)(.+?)(?<!\s)\*(?![*\w])", r"<em>\1</em>", result)
    return re.sub(r"\x00(\d+)\x00", lambda m: encode_entities(held[int(m.group(1))]), result)


def markdown_to_html(markdown: str | None) -> str:
    """Render Markdown as simple block HTML.

    Supports ATX headings, bullet and numbered lists, block quotes, fenced
    code, standalone images, paragraphs and page-break markers.
    """
    if not markdown or not markdown.strip():
        return ""

    parts: list[str] = []
    paragraph: list[str] = []
    quote: list[str] = []
    code: list[str] = []
    list_type: str | None = None
    in_code = False

    def flush_paragraph() -> None:
        if paragraph:
            parts.append(f"<p>{render_inline_markdown(' '.join(paragraph))}</p>")
            paragraph.clear()

    def flush_quote() -> None:
        if quote:
            body = "".join(f"<p>{render_inline_markdown(line)}</p>" for line in quote)
            parts.append(f"<blockquote>{body}</blockquote>")
            quote.clear()

    def close_list() -> None:
        nonlocal list_type
        if list_type:
            parts.append(f"</{list_type}>")
            list_type = None

    def close_blocks() -> None:
        flush_paragraph()
        flush_quote()
        close_list()

    def open_list(kind: str) -> None:
        nonlocal list_type
        flush_paragraph()
        flush_quote()
        if list_type != kind:
            close_list()
            parts.append(f"<{kind}>")
            list_type = kind

    for raw_line in markdown.replace("\r\n", "\n").split("\n"):
        line = raw_line.strip()

        if in_code:
            if line.startswith("```"):
                parts.append(
                    f"<pre><code>{encode_entities(chr(10).join(code))}</code></pre>"
                )
                code.clear()
                in_code = False
            else:
                code.append(raw_line)
            continue

        if line.startswith("```"):
            close_blocks()
            in_code = True
            continue

        if not line:
            close_blocks()
            continue

        if PAGE_BREAK_RE.fullmatch(line):
            close_blocks()
            parts.append(PAGE_BREAK_MARK)
            continue

        heading = _MD_HEADING_RE.match(line)
        if heading:
            close_blocks()
            level = len(heading.group(1))
            parts.append(
                f"<h{level}>{render_inline_markdown(heading.group(2))}</h{level}>"
            )
            continue

        if line.startswith(">"):
            flush_paragraph()
            close_list()
            quote.append(line.lstrip(">").strip())
            continue

        image = _MD_IMAGE_LINE_RE.match(line)
        if image:
            close_blocks()
            alt = encode_entities(image.group(1) or "Image")
            parts.append(f'<img src="{encode_entities(image.group(2))}" alt="{alt}" />')
            continue

        unordered = _MD_UNORDERED_RE.match(line)
        if unordered:
            open_list("ul")
            parts.append(f"<li>{render_inline_markdown(unordered.group(1))}</li>")
            continue

        ordered = _MD_ORDERED_RE.match(line)
        if ordered:
            open_list("ol")
            parts.append(f"<li>{render_inline_markdown(ordered.group(1))}</li>")
            continue

        flush_quote()
        close_list()
        paragraph.append(line)

    if in_code:
        parts.append(f"<pre><code>{encode_entities(chr(10).join(code))}</code></pre>")
    close_blocks()

    return "\n".join(parts)


# =============================================================================
# HTML -> plain text
# =============================================================================

BLOCK_TAGS = [
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote",
    "pre", "div", "td", "th", "dt", "dd", "figcaption",
]


def html_to_plain_text(html: str | None) -> str:
    """Plain text with block elements as blank-line-separated paragraphs.

    Every string belongs to its nearest block ancestor (or to the top level),
    so text sitting beside nested blocks is kept. List items become
    ``- item`` lines; consecutive items stay on adjacent lines.
    """
    if not html or not html.strip():
        return ""

    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()

    # (owning block or None, strings) in document order
    segments: list[tuple[Tag | None, list[str]]] = []
    for string in soup.find_all(string=True):
        if isinstance(string, PreformattedString) or not string.strip():
            continue
        owner = string.find_parent(BLOCK_TAGS)
        if segments and segments[-1][0] is owner:
            segments[-1][1].append(string)
        else:
            segments.append((owner, [string]))

    chunks: list[str] = []
    previous_was_item = False
    for owner, strings in segments:
        text = collapse_whitespace(" ".join(strings))
        if not text:
            continue
        is_item = owner is not None and (
            owner.name == "li" or owner.find_parent("li") is not None
        )
        if is_item:
            text = f"- {text}"
            separator = "\n" if previous_was_item else "\n\n"
        else:
            separator = "\n\n"
        if chunks:
            chunks.append(separator)
        chunks.append(text)
        previous_was_item = is_item

    return "".join(chunks)
