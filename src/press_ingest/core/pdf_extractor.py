"""Byte-level PDF text extraction with heuristic structure recovery.

The buffer is read as one latin-1 string and scanned for text-showing
operators. No object graph is parsed, so compressed content streams yield
nothing and the caller falls through to its placeholder document.
"""

import logging
import math
import re
from collections import Counter

from press_ingest.core.text import count_words, encode_entities
from press_ingest.core.transcoder import markdown_to_html
from press_ingest.models.document import PdfExtraction, PdfMetadata, TextRun

log = logging.getLogger(__name__)

ESCAPE_MAP: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "\\": "\\",
    "(": "(",
    ")": ")",
}

OCTAL_DIGITS = "01234567"
UTF16_BOM = "\xfe\xff"

SCANNED_WARNING = "PDF may be scanned or image-based. Text extraction is limited."
NO_HEADINGS_WARNING = "No headings detected. Document structure may not be preserved."
IMAGES_WARNING = "PDF contains images which are not extracted in this import."
BASIC_WARNING = "PDF parsed using basic extractor. Some structure may be lost."

MIN_FRAGMENTS = 5
HEADING_FONT_RATIO = 1.3
KERNING_SPACE_THRESHOLD = -200

_LITERAL = r"\((?:\\.|[^\\)])*\)"

# One scan over the buffer keeps show operators and font changes in order
_SCAN_RE = re.compile(
    rf"(?P<single>{_LITERAL})\s*Tj"
    rf"|(?P<array>\[(?:{_LITERAL}|[^\]()])*\])\s*TJ"
    r"|/(?P<font>[^\s/\[\]()<>]+)\s+(?P<size>-?\d+(?:\.\d+)?)\s+Tf",
    re.DOTALL,
)
_ARRAY_TOKEN_RE = re.compile(
    r"\((?P<literal>(?:\\.|[^\\)])*)\)|(?P<kern>-?(?:\d+(?:\.\d*)?|\.\d+))",
    re.DOTALL,
)
_HEADING_MARKER_RE = re.compile(r"^(Chapter|Capítulo|Sección|Section)\s+\d+", re.IGNORECASE)
_BULLET_RE = re.compile(r"^\s*[-•*+]\s+")
_NUMBERED_RE = re.compile(r"^\s*\d+[.)]\s+")
_PAGE_OBJECT_RE = re.compile(r"/Type\s*/Page\b")
_IMAGE_RE = re.compile(r"/XObject\s*<<|/Subtype\s*/Image\b")


# =============================================================================
# String Literals
# =============================================================================


def decode_pdf_string(value: str) -> str:
    """Decode the body of a PDF string literal (without the outer parens).

    Named escapes map to their characters, one to three octal digits
    decode to a byte, any other escaped character passes through and a
    trailing lone backslash is dropped. Literals starting with the
    UTF-16BE byte order mark are decoded as UTF-16BE.
    """
    result: list[str] = []
    i = 0
    length = len(value)
    while i < length:
        char = value[i]
        i += 1
        if char != "\\":
            result.append(char)
            continue
        if i >= length:
            break
        escaped = value[i]
        if escaped in ESCAPE_MAP:
            result.append(ESCAPE_MAP[escaped])
            i += 1
        elif escaped in OCTAL_DIGITS:
            end = i
            while end < length and end - i < 3 and value[end] in OCTAL_DIGITS:
                end += 1
            result.append(chr(int(value[i:end], 8) & 0xFF))
            i = end
        else:
            result.append(escaped)
            i += 1

    decoded = "".join(result)
    if decoded.startswith(UTF16_BOM):
        try:
            return decoded[2:].encode("latin-1").decode("utf-16-be")
        except UnicodeError:
            return decoded
    return decoded


def decode_pdf_hex_string(value: str) -> str:
    """Decode a ``<...>`` hex string body, odd digit counts padded with 0."""
    digits = re.sub(r"[^0-9A-Fa-f]", "", value)
    if len(digits) % 2:
        digits += "0"
    raw = bytes.fromhex(digits)
    if raw.startswith(b"\xfe\xff"):
        return raw[2:].decode("utf-16-be", errors="replace")
    return raw.decode("latin-1")


def _join_array_fragments(body: str) -> str:
    parts: list[str] = []
    for token in _ARRAY_TOKEN_RE.finditer(body):
        literal = token.group("literal")
        if literal is not None:
            parts.append(decode_pdf_string(literal))
        elif (
            parts
            and float(token.group("kern")) <= KERNING_SPACE_THRESHOLD
            and not parts[-1].endswith(" ")
        ):
            # Large negative kerning is how many producers encode a word gap
            parts.append(" ")
    return "".join(parts)


def scan_text_runs(raw: str) -> list[TextRun]:
    """Recover decoded text runs in encounter order.

    Empty runs are dropped; surrounding whitespace of each run is trimmed.
    """
    runs: list[TextRun] = []
    font_size: float | None = None
    bold = False

    for match in _SCAN_RE.finditer(raw):
        if match.group("font") is not None:
            size = float(match.group("size"))
            font_size = size if size > 0 else None
            bold = "bold" in match.group("font").lower()
            continue

        if match.group("single") is not None:
            text = decode_pdf_string(match.group("single")[1:-1])
            operator = "Tj"
        else:
            text = _join_array_fragments(match.group("array")[1:-1])
            operator = "TJ"

        text = text.strip()
        if text:
            runs.append(TextRun(text=text, font_size=font_size, bold=bold, operator=operator))

    return runs


def normalize_whitespace(text: str) -> str:
    """LF line endings, single spaces, at most one blank line, trimmed."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


# =============================================================================
# Structure Heuristics
# =============================================================================


def _body_font_size(runs: list[TextRun]) -> float | None:
    sizes = [round(run.font_size, 1) for run in runs if run.font_size]
    if not sizes:
        return None
    return Counter(sizes).most_common(1)[0][0]


def is_likely_heading(
    text: str,
    next_text: str = "",
    font_size: float | None = None,
    body_size: float | None = None,
) -> bool:
    """Guess whether a line is a heading from its shape and neighbour."""
    if len(text) < 100 and len(next_text) > 200:
        return True
    if text.isupper() and len(text) > 3:
        return True
    if text.strip().endswith(":"):
        return True
    if _HEADING_MARKER_RE.match(text):
        return True
    if font_size and body_size and font_size >= body_size * HEADING_FONT_RATIO:
        return True
    return False


def is_likely_list_item(text: str) -> bool:
    return bool(_BULLET_RE.match(text) or _NUMBERED_RE.match(text))


def heading_level(text: str) -> int:
    return 2 if len(text) < 50 else 3


def text_to_markdown(runs: list[TextRun]) -> str:
    """Classify each line as heading, list item or body line.

    Runs are whitespace-normalized and split on newlines first; every line
    keeps the font size of the run it came from.
    """
    body_size = _body_font_size(runs)
    lines = [
        (line.strip(), run.font_size)
        for run in runs
        for line in normalize_whitespace(run.text).split("\n")
        if line.strip()
    ]
    markdown: list[str] = []
    in_list = False

    for index, (line, size) in enumerate(lines):
        next_line = lines[index + 1][0] if index + 1 < len(lines) else ""

        if is_likely_heading(line, next_line, size, body_size):
            if in_list:
                markdown.append("")
                in_list = False
            markdown.append(f"{'#' * heading_level(line)} {line}")
            markdown.append("")
            continue

        if is_likely_list_item(line):
            if not in_list:
                markdown.append("")
                in_list = True
            item = _NUMBERED_RE.sub("", _BULLET_RE.sub("", line, count=1), count=1)
            markdown.append(f"- {item}")
            continue

        if in_list:
            markdown.append("")
            in_list = False
        markdown.append(line)

    return re.sub(r"\n{3,}", "\n\n", "\n".join(markdown)).strip()


# =============================================================================
# Metadata & Page Estimate
# =============================================================================


def _metadata_value(raw: str, key: str) -> str | None:
    match = re.search(rf"/{key}\s*\((?P<literal>(?:\\.|[^\\)])*)\)", raw, re.DOTALL)
    if match:
        return decode_pdf_string(match.group("literal")).strip() or None
    match = re.search(rf"/{key}\s*<(?P<hex>[0-9A-Fa-f\s]*)>", raw)
    if match:
        return decode_pdf_hex_string(match.group("hex")).strip() or None
    return None


def extract_pdf_metadata(raw: str) -> PdfMetadata:
    """Title, author and creation date markers found anywhere in the buffer."""
    return PdfMetadata(
        title=_metadata_value(raw, "Title"),
        author=_metadata_value(raw, "Author"),
        created_date=_metadata_value(raw, "CreationDate"),
        has_images=bool(_IMAGE_RE.search(raw)),
    )


def estimate_pages(raw: str, text: str, words_per_page: int = 250) -> int:
    """Count page objects, else estimate from the recovered word count."""
    page_objects = len(_PAGE_OBJECT_RE.findall(raw))
    if page_objects:
        return page_objects
    return max(1, math.ceil(count_words(text) / words_per_page))


# =============================================================================
# Extractors
# =============================================================================


def extract_pdf_content(data: bytes, words_per_page: int = 250) -> PdfExtraction | None:
    """Extract text with heading and list detection.

    Returns None when no text is recovered at all.
    """
    raw = data.decode("latin-1")
    runs = scan_text_runs(raw)
    text = normalize_whitespace("\n".join(run.text for run in runs))
    if not text:
        log.info("No text-showing operators with content found")
        return None

    metadata = extract_pdf_metadata(raw)
    markdown = text_to_markdown(runs)

    warnings: list[str] = []
    if metadata.has_images:
        warnings.append(IMAGES_WARNING)
    if len(runs) < MIN_FRAGMENTS:
        warnings.append(SCANNED_WARNING)
    if not re.search(r"^#{1,6} ", markdown, re.MULTILINE):
        warnings.append(NO_HEADINGS_WARNING)

    log.info(f"Recovered {len(runs)} text fragments from PDF buffer")
    return PdfExtraction(
        text=text,
        html=markdown_to_html(markdown),
        markdown=markdown,
        estimated_pages=estimate_pages(raw, text, words_per_page),
        fragment_count=len(runs),
        warnings=warnings,
        metadata=metadata,
    )


def extract_pdf_content_basic(data: bytes, words_per_page: int = 250) -> PdfExtraction | None:
    """Extract text as plain paragraphs, without structure heuristics."""
    raw = data.decode("latin-1")
    runs = scan_text_runs(raw)
    text = normalize_whitespace("\n".join(run.text for run in runs))
    if not text:
        return None

    paragraphs = [block.strip() for block in text.split("\n\n") if block.strip()]
    body = "\n\n".join(paragraphs)
    return PdfExtraction(
        text=body,
        html="\n".join(f"<p>{encode_entities(paragraph)}</p>" for paragraph in paragraphs),
        markdown=body,
        estimated_pages=estimate_pages(raw, body, words_per_page),
        fragment_count=len(runs),
        warnings=[BASIC_WARNING],
        metadata=extract_pdf_metadata(raw),
    )
