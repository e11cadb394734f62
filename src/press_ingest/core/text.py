"""Shared text helpers: tag stripping, word counting and HTML entities."""

import re

# Named entities understood by the decoder. Numeric forms are handled separately.
NAMED_ENTITIES: dict[str, str] = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
    "copy": "©",
    "reg": "®",
    "mdash": "—",
    "ndash": "–",
    "ldquo": "“",
    "rdquo": "”",
    "lsquo": "‘",
    "rsquo": "’",
    "hellip": "…",
    "laquo": "«",
    "raquo": "»",
}

ENCODE_MAP: dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}

_ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
MARKDOWN_ESCAPE_RE = re.compile(r"\\([\\`*_{}\[\]()#+\-.!<>~|])")


def _replace_entity(match: re.Match) -> str:
    name = match.group(1)
    if name.startswith(("#x", "#X")):
        codepoint = int(name[2:], 16)
    elif name.startswith("#"):
        codepoint = int(name[1:])
    else:
        return NAMED_ENTITIES.get(name, match.group(0))
    try:
        return chr(codepoint)
    except (ValueError, OverflowError):
        return match.group(0)


def decode_entities(text: str) -> str:
    """Decode named, decimal and hexadecimal HTML entities in one pass.

    Unknown named entities are left untouched, and an already-decoded
    ampersand is never decoded a second time (``&amp;lt;`` -> ``&lt;``).
    """
    return _ENTITY_RE.sub(_replace_entity, text)


def encode_entities(text: str) -> str:
    """Escape the five HTML-significant characters."""
    return "".join(ENCODE_MAP.get(char, char) for char in text)


def strip_tags(html: str, replacement: str = "") -> str:
    """Remove every ``<...>`` tag from a string."""
    return _TAG_RE.sub(replacement, html)


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    return _WS_RE.sub(" ", text).strip()


def count_words(plain_text: str) -> int:
    """Count whitespace-separated words. The only word counter in the package."""
    return len(plain_text.split())


def html_plain_text(html: str) -> str:
    """Plain text of an HTML fragment, tags replaced by spaces.

    Every HTML-side word count in the package is taken from this text.
    """
    return collapse_whitespace(decode_entities(strip_tags(html, " ")))


def unescape_markdown(text: str) -> str:
    r"""Drop Markdown backslash escapes, keeping the escaped character (``\#`` -> ``#``)."""
    return MARKDOWN_ESCAPE_RE.sub(r"\1", text)
