"""Unit tests for the section extraction cascade."""

from bs4 import BeautifulSoup

from artdirector.core.section_extractor import (
    DEFAULT_STRATEGIES,
    SectionExtractor,
    extract_section_data,
    is_excluded_element,
    title_from_content,
)

LONG = (
    "Our platform helps distributed teams plan launches, track progress and "
    "share results with every stakeholder in one place."
)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class TestExtractSectionData:
    def test_heading_becomes_title(self):
        element = _soup(f"<section><h2>Plan together</h2><p>{LONG}</p></section>").section
        section = extract_section_data(element)
        assert section is not None
        assert section.title == "Plan together"
        assert section.content == LONG
        assert section.element_tag == "section"

    def test_short_paragraphs_are_ignored(self):
        element = _soup(f"<div><p>Too short</p><p>{LONG}</p></div>").div
        assert extract_section_data(element).content == LONG

    def test_title_synthesized_without_heading(self):
        element = _soup(f"<article><p>{LONG}</p></article>").article
        assert extract_section_data(element).title == "Our platform helps distributed teams"

    def test_thin_element_is_rejected(self):
        assert extract_section_data(_soup("<div>Hello world</div>").div) is None

    def test_images_are_counted(self):
        element = _soup(f'<section><img src="a.png"><img src="b.png"><p>{LONG}</p></section>').section
        section = extract_section_data(element)
        assert section.has_image is True
        assert section.image_count == 2


def test_title_from_content_truncates_long_words():
    content = "Supercalifragilisticexpialidocious " * 5
    title = title_from_content(content.strip())
    assert title.endswith("...")
    assert len(title) == 53


class TestIsExcludedElement:
    def test_descendant_of_footer(self):
        soup = _soup("<footer><div id='inner'>x</div></footer>")
        assert is_excluded_element(soup.find(id="inner")) is True

    def test_keyword_in_class(self):
        assert is_excluded_element(_soup("<div class='cookie-banner'>x</div>").div) is True

    def test_plain_div(self):
        assert is_excluded_element(_soup("<div class='pricing'>x</div>").div) is False


class TestSectionExtractor:
    """Test the strategy cascade end to end."""

    def test_semantic_sections_stop_the_cascade(self):
        sections_html = "".join(
            f"<section><h2>Part {i}</h2><p>{LONG} Variant {i}.</p></section>" for i in range(3)
        )
        html = f"<main>{sections_html}<div class='filler'><p>{LONG} {LONG}</p></div></main>"
        sections = SectionExtractor().extract_from_html(html)
        assert len(sections) == 3
        assert {section.element_tag for section in sections} == {"section"}

    def test_div_tier_fills_thin_pages(self):
        html = f"""
        <div class="hero"><p>{LONG}</p></div>
        <footer><div><p>{LONG} footer copy</p></div></footer>
        """
        sections = SectionExtractor().extract_from_html(html)
        assert [section.classes for section in sections] == ["hero"]

    def test_sorted_by_length_and_indexed(self):
        html = (
            f"<section><p>{LONG}</p></section>"
            f"<section><p>{LONG} {LONG}</p></section>"
            f"<section><p>{LONG} {LONG} {LONG}</p></section>"
        )
        sections = SectionExtractor().extract_from_html(html)
        lengths = [len(section.content) for section in sections]
        assert lengths == sorted(lengths, reverse=True)
        assert [section.index for section in sections] == [0, 1, 2]

    def test_element_admitted_once(self):
        html = f"<main><section class='content'><p>{LONG}</p></section></main>"
        sections = SectionExtractor().extract_from_html(html)
        assert len(sections) == 1

    def test_cap_applies(self):
        html = "".join(f"<article><p>{LONG} {i}</p></article>" for i in range(10))
        extractor = SectionExtractor(DEFAULT_STRATEGIES, max_sections=4)
        assert len(extractor.extract_from_html(html)) == 4
