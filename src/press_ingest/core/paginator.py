"""Device-aware pagination of HTML or Markdown content."""

import logging
import math
import re
from abc import ABC, abstractmethod
from typing import Callable

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import PageElement

from press_ingest.core.text import collapse_whitespace
from press_ingest.core.transcoder import PAGE_BREAK_RE, markdown_to_html
from press_ingest.models.pagination import Page, PageType, PaginationConfig

log = logging.getLogger(__name__)

DEFAULT_CORRECTION_FACTOR = 0.72
CHAR_WIDTH_RATIO = 0.5
BLOCKQUOTE_INDENT_PX = 40
IMAGE_LINES = 15
FORCED_BREAK_MIN_LINES = 3
CHAPTER_TAGS = ("h1", "h2")
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

EMPTY_PAGE_HTML = '<p class="text-muted-foreground italic">No hay contenido disponible</p>'

# Comments alone do not make HTML; Markdown carries page-break comments too
_HTML_HINT_RE = re.compile(r"<(?:[A-Za-z][A-Za-z0-9]*)(?:\s[^>]*)?/?>")


# =============================================================================
# Line Estimators
# =============================================================================


class LineEstimator(ABC):
    """Estimates how many body lines a top-level node occupies."""

    @abstractmethod
    def estimate_node_cost(self, node: PageElement) -> float:
        """Return the node's height in lines."""
        pass


class HeuristicLineEstimator(LineEstimator):
    """Static estimate from character counts, used without a layout engine."""

    def __init__(self, config: PaginationConfig):
        self.config = config

    def chars_per_line(self, indent: float = 0.0) -> int:
        width = self.config.content_width - indent
        return max(1, math.floor(width / (self.config.font_size * CHAR_WIDTH_RATIO)))

    def text_lines(self, text: str, indent: float = 0.0) -> int:
        return max(1, math.ceil(len(text) / self.chars_per_line(indent)))

    def estimate_node_cost(self, node: PageElement) -> float:
        if isinstance(node, NavigableString):
            text = collapse_whitespace(str(node))
            return float(self.text_lines(text)) if text else 0.0
        if not isinstance(node, Tag):
            return 0.0

        name = node.name.lower()
        text = collapse_whitespace(node.get_text(" "))

        if name in HEADING_TAGS:
            return max(2.0, 4.5 - int(name[1]) * 0.5)
        if name == "p":
            return self.text_lines(text) + 1.5
        if name in ("ul", "ol"):
            items = node.find_all("li", recursive=False)
            return (
                1
                + sum(self.text_lines(collapse_whitespace(item.get_text(" "))) + 0.5 for item in items)
                + 1
            )
        if name == "blockquote":
            return self.text_lines(text, indent=BLOCKQUOTE_INDENT_PX) + 2
        if name == "img":
            return float(IMAGE_LINES)
        if name == "pre":
            return len(node.get_text().strip("\n").split("\n")) + 2

        total = sum(self.estimate_node_cost(child) for child in node.children)
        return max(1.0, total)


class MeasuredLineEstimator(LineEstimator):
    """Cost from a real layout surface.

    ``measure`` receives the node's HTML and returns its rendered height in
    pixels at the profile's content width and font.
    """

    def __init__(self, config: PaginationConfig, measure: Callable[[str], float]):
        self.config = config
        self.measure = measure

    def estimate_node_cost(self, node: PageElement) -> float:
        return self.measure(str(node)) / self.config.line_height_px


# =============================================================================
# Paginator
# =============================================================================


def looks_like_html(content: str) -> bool:
    return bool(_HTML_HINT_RE.search(content))


def _is_page_break(node: PageElement) -> bool:
    if isinstance(node, Comment):
        return bool(PAGE_BREAK_RE.fullmatch(f"<!--{node}-->".strip()))
    if isinstance(node, Tag) and node.name == "div":
        return "page-break" in (node.get("class") or [])
    return False


def _heading_text(node: PageElement) -> str | None:
    if isinstance(node, Tag) and node.name.lower() in CHAPTER_TAGS:
        return collapse_whitespace(node.get_text(" "))
    return None


class Paginator:
    """Splits content into pages using a pluggable line estimator.

    Both estimators share the same break rules: a page closes when the next
    node would overflow it, before an H1/H2 once the page holds more than a
    few lines, and at explicit page-break markers.
    """

    def __init__(
        self,
        config: PaginationConfig,
        estimator: LineEstimator | None = None,
        correction_factor: float = DEFAULT_CORRECTION_FACTOR,
        lines_per_page: int | None = None,
    ):
        self.config = config
        self.estimator = estimator or HeuristicLineEstimator(config)
        if lines_per_page is None:
            # The correction factor absorbs inter-element spacing
            lines_per_page = math.floor(
                config.content_height / config.line_height_px * correction_factor
            )
        self.lines_per_page = max(1, lines_per_page)

    def _body_nodes(self, html: str) -> list[PageElement]:
        soup = BeautifulSoup(html, "lxml")
        root = soup.body or soup
        nodes: list[PageElement] = []
        for node in root.children:
            if isinstance(node, Comment):
                if _is_page_break(node):
                    nodes.append(node)
                continue
            if isinstance(node, NavigableString) and not str(node).strip():
                continue
            nodes.append(node)
        return nodes

    def placeholder_page(self, page_number: int = 1) -> Page:
        return Page(type=PageType.CONTENT, page_number=page_number, html=EMPTY_PAGE_HTML)

    def paginate(self, content: str | None, start_page: int = 1) -> list[Page]:
        """Paginate HTML (or Markdown, converted first) into content pages."""
        if not content or not content.strip():
            return [self.placeholder_page(start_page)]

        html = content if looks_like_html(content) else markdown_to_html(content)
        nodes = self._body_nodes(html)

        pages: list[Page] = []
        current: list[str] = []
        sections: list[str] = []
        current_lines = 0.0
        chapter_title: str | None = None

        def close_page() -> None:
            nonlocal current, sections, current_lines
            pages.append(
                Page(
                    type=PageType.CONTENT,
                    page_number=start_page + len(pages),
                    html="\n".join(current),
                    chapter_title=chapter_title,
                    section_titles=sections,
                )
            )
            current, sections, current_lines = [], [], 0.0

        for node in nodes:
            if _is_page_break(node):
                if current:
                    close_page()
                continue

            cost = self.estimator.estimate_node_cost(node)
            heading = _heading_text(node)

            if current:
                if current_lines + cost > self.lines_per_page:
                    close_page()
                elif heading is not None and current_lines > FORCED_BREAK_MIN_LINES:
                    close_page()

            if heading is not None:
                chapter_title = heading
                sections.append(heading)
            current.append(str(node))
            current_lines += cost

        if current:
            close_page()

        if not pages:
            return [self.placeholder_page(start_page)]

        log.info(
            f"Paginated content into {len(pages)} pages "
            f"({self.lines_per_page} lines per page)"
        )
        return pages


def paginate_content(
    content: str | None,
    config: PaginationConfig,
    estimator: LineEstimator | None = None,
    start_page: int = 1,
) -> list[Page]:
    """Paginate with the default correction factor."""
    return Paginator(config, estimator=estimator).paginate(content, start_page=start_page)
