from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from press_ingest.core.device_profiles import (
    DEVICE_PROFILES,
    approx_lines_per_page,
    available_devices,
    get_profile,
)
from press_ingest.core.errors import UnknownDeviceError
from press_ingest.core.paginator import (
    EMPTY_PAGE_HTML,
    HeuristicLineEstimator,
    MeasuredLineEstimator,
    Paginator,
    looks_like_html,
    paginate_content,
)
from press_ingest.models.pagination import PageType, PaginationConfig


def _node(html: str, name: str):
    return BeautifulSoup(html, "lxml").find(name)


# =============================================================================
# Device profiles
# =============================================================================


def test_available_devices() -> None:
    assert available_devices() == ["laptop", "tablet", "mobile", "ereader"]


def test_get_profile_is_case_insensitive() -> None:
    assert get_profile(" Tablet ") is DEVICE_PROFILES["tablet"]


def test_unknown_device() -> None:
    with pytest.raises(UnknownDeviceError) as excinfo:
        get_profile("watch")
    assert isinstance(excinfo.value, ValueError)
    assert "laptop" in str(excinfo.value)


def test_laptop_lines_per_page(laptop_config: PaginationConfig) -> None:
    assert laptop_config == DEVICE_PROFILES["laptop"]
    assert approx_lines_per_page(laptop_config) == 28
    assert Paginator(laptop_config).lines_per_page == 20


@pytest.mark.parametrize("device", ["laptop", "tablet", "mobile", "ereader"])
def test_corrected_capacity_is_smaller(device: str) -> None:
    config = get_profile(device)
    assert 1 <= Paginator(config).lines_per_page < approx_lines_per_page(config)


# =============================================================================
# Line estimators
# =============================================================================


@pytest.mark.parametrize(
    ("html", "name", "cost"),
    [
        ("<h1>Título</h1>", "h1", 4.0),
        ("<h3>Título</h3>", "h3", 3.0),
        ("<h6>Título</h6>", "h6", 2.0),
        ("<p>texto</p>", "p", 2.5),
        ("<p>" + "x" * 100 + "</p>", "p", 3.5),
        ("<ul><li>uno</li><li>dos</li></ul>", "ul", 5.0),
        ("<blockquote>cita</blockquote>", "blockquote", 3.0),
        ("<pre>a\nb\nc</pre>", "pre", 5.0),
        ('<img src="a.png" />', "img", 15.0),
        ("<div><p>a</p><p>b</p></div>", "div", 5.0),
    ],
)
def test_heuristic_costs(laptop_config: PaginationConfig, html: str, name: str, cost: float) -> None:
    estimator = HeuristicLineEstimator(laptop_config)
    assert estimator.estimate_node_cost(_node(html, name)) == pytest.approx(cost)


def test_chars_per_line(laptop_config: PaginationConfig) -> None:
    estimator = HeuristicLineEstimator(laptop_config)
    assert estimator.chars_per_line() == 54
    assert estimator.chars_per_line(indent=40) == 49


def test_measured_estimator(laptop_config: PaginationConfig) -> None:
    seen: list[str] = []

    def measure(html: str) -> float:
        seen.append(html)
        return 100.0

    paginator = Paginator(
        laptop_config,
        estimator=MeasuredLineEstimator(laptop_config, measure),
        lines_per_page=8,
    )
    pages = paginator.paginate("".join(f"<p>p{i}</p>" for i in range(4)))
    assert len(pages) == 2
    assert seen[0] == "<p>p0</p>"


# =============================================================================
# Paginator
# =============================================================================


def test_ten_paragraphs_five_lines_per_page(laptop_config: PaginationConfig) -> None:
    content = "".join(f"<p>Line {i}</p>" for i in range(10))
    pages = Paginator(laptop_config, lines_per_page=5).paginate(content)
    assert len(pages) == 5
    assert [page.page_number for page in pages] == [1, 2, 3, 4, 5]
    assert all(page.html.count("<p>") == 2 for page in pages)
    assert all(page.type == PageType.CONTENT for page in pages)


@pytest.mark.parametrize("content", [None, "", "   \n", "<!-- page-break -->"])
def test_empty_content_gives_placeholder(laptop_config: PaginationConfig, content: str | None) -> None:
    pages = paginate_content(content, laptop_config)
    assert len(pages) == 1
    assert pages[0].html == EMPTY_PAGE_HTML
    assert pages[0].page_number == 1


def test_forced_break_before_chapter_heading(laptop_config: PaginationConfig) -> None:
    pages = paginate_content("<p>a</p><p>b</p><h2>Next</h2><p>c</p>", laptop_config)
    assert len(pages) == 2
    assert pages[0].chapter_title is None
    assert pages[1].chapter_title == "Next"
    assert pages[1].section_titles == ["Next"]
    assert pages[1].html.startswith("<h2>Next</h2>")


def test_heading_near_page_top_does_not_break(laptop_config: PaginationConfig) -> None:
    pages = paginate_content("<p>a</p><h1>T</h1><p>b</p>", laptop_config)
    assert len(pages) == 1
    assert pages[0].chapter_title == "T"


def test_chapter_title_carries_over(laptop_config: PaginationConfig) -> None:
    content = "<h1>Uno</h1>" + "<p>texto</p>" * 20
    pages = paginate_content(content, laptop_config)
    assert len(pages) == 3
    assert all(page.chapter_title == "Uno" for page in pages)
    assert pages[0].section_titles == ["Uno"]
    assert pages[1].section_titles == []


@pytest.mark.parametrize(
    "content",
    [
        "<p>a</p><!-- page-break --><p>b</p>",
        '<p>a</p><div class="page-break"></div><p>b</p>',
        "a\n\n<!-- page-break -->\n\nb",
    ],
)
def test_page_break_markers(laptop_config: PaginationConfig, content: str) -> None:
    pages = paginate_content(content, laptop_config)
    assert len(pages) == 2
    assert all("page-break" not in page.html for page in pages)


def test_oversized_node_gets_own_page(laptop_config: PaginationConfig) -> None:
    content = '<p>x</p><img src="a.png"/><p>y</p>'
    pages = Paginator(laptop_config, lines_per_page=5).paginate(content)
    assert len(pages) == 3
    assert pages[1].html.startswith("<img")


def test_markdown_is_converted(laptop_config: PaginationConfig) -> None:
    pages = paginate_content("# Title\n\nText", laptop_config)
    assert len(pages) == 1
    assert "<h1>Title</h1>" in pages[0].html
    assert pages[0].chapter_title == "Title"


def test_start_page(laptop_config: PaginationConfig) -> None:
    content = "".join(f"<p>Line {i}</p>" for i in range(10))
    pages = Paginator(laptop_config, lines_per_page=5).paginate(content, start_page=3)
    assert [page.page_number for page in pages] == [3, 4, 5, 6, 7]


def test_looks_like_html() -> None:
    assert looks_like_html("<p>x</p>")
    assert looks_like_html("texto <br/> más")
    assert not looks_like_html("# Título\n\n<!-- page-break -->")
    assert not looks_like_html("a < b")
