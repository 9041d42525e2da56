"""Find the content sections of a web page that could carry an illustration.

Pages are structured in wildly different ways, so sections are located with
an ordered list of selector strategies.  Each strategy runs only while too
few sections have been admitted by the previous ones:

1. **Semantic containers** - ``section``, ``article``, ``aside``,
   ``[role=region]``.
2. **Content-ish selectors** - ``main > div`` and elements whose class or id
   mentions content, section, block, container, wrapper or main.
3. **Every div** - minus page chrome (header, footer, navigation, menus,
   cookie banners, modals), with a higher minimum length because generic
   containers are noisy.

An element admitted by one strategy is never admitted again by a later one.
The result is sorted by content length (longest first) and capped.

Usage
-----
::

    soup = BeautifulSoup(html, "html.parser")
    sections = SectionExtractor().extract(soup)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from artdirector.core.models import ScannedSection

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 50
MIN_DIV_CONTENT_LENGTH = 100
MIN_PARAGRAPH_LENGTH = 20
MAX_CONTENT_LENGTH = 500
MAX_SECTIONS = 50
TIER_THRESHOLD = 3

SEMANTIC_SELECTORS = ("section", "article", "aside", '[role="region"]')
CONTENT_SELECTORS = (
    "main section",
    "main article",
    "main > div",
    '[class*="content"]',
    '[class*="section"]',
    '[class*="block"]',
    '[class*="container"] > div',
    '[class*="wrapper"] > div',
    '[id*="content"]',
    '[id*="main"]',
)
EXCLUDED_TAGS = frozenset({"header", "footer", "nav", "aside", "script", "style", "noscript"})
EXCLUDED_KEYWORDS = ("header", "footer", "nav", "menu", "sidebar", "cookie", "modal", "popup")

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class SectionStrategy:
    """One tier of the cascade.

    Attributes:
        name: Label used in logs.
        selectors: CSS selectors evaluated in order.
        min_length: Content must be strictly longer than this to be admitted.
        accept: Optional extra predicate on the candidate element.
    """

    name: str
    selectors: tuple[str, ...]
    min_length: int = MIN_CONTENT_LENGTH
    accept: Callable[[Tag], bool] | None = None

    def candidates(self, soup: BeautifulSoup) -> Iterable[Tag]:
        for selector in self.selectors:
            yield from soup.select(selector)


def is_excluded_element(element: Tag) -> bool:
    """Return whether *element* is page chrome rather than content.

    An element is chrome when it, or any ancestor, is one of the excluded
    tags, or when its own class or id mentions an excluded keyword.
    """
    node: Tag | None = element
    while node is not None and node.name != "[document]":
        if node.name in EXCLUDED_TAGS:
            return True
        node = node.parent

    class_name = " ".join(element.get("class") or []).lower()
    element_id = (element.get("id") or "").lower()
    return any(keyword in class_name or keyword in element_id for keyword in EXCLUDED_KEYWORDS)


DEFAULT_STRATEGIES: tuple[SectionStrategy, ...] = (
    SectionStrategy("semantic", SEMANTIC_SELECTORS),
    SectionStrategy("content-selectors", CONTENT_SELECTORS),
    SectionStrategy(
        "all-divs",
        ("div",),
        min_length=MIN_DIV_CONTENT_LENGTH,
        accept=lambda element: not is_excluded_element(element),
    ),
)


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def title_from_content(content: str) -> str:
    """Synthesize a title from the first five words of *content*."""
    words = " ".join(content.split(" ")[:5])
    return words[:50] + "..." if len(words) > 50 else words


def extract_section_data(element: Tag) -> ScannedSection | None:
    """Build a :class:`ScannedSection` from one element.

    Returns:
        ``None`` when the element carries fewer than
        :data:`MIN_CONTENT_LENGTH` characters of text.
    """
    heading = element.find(["h1", "h2", "h3", "h4", "h5", "h6"])
    paragraphs = element.find_all("p")
    images = element.find_all("img")

    if paragraphs:
        texts = (paragraph.get_text().strip() for paragraph in paragraphs)
        content = " ".join(text for text in texts if len(text) > MIN_PARAGRAPH_LENGTH)
    else:
        content = element.get_text().strip()

    content = normalize_whitespace(content)[:MAX_CONTENT_LENGTH]
    if len(content) < MIN_CONTENT_LENGTH:
        return None

    heading_text = normalize_whitespace(heading.get_text()) if heading else ""
    return ScannedSection(
        title=heading_text or title_from_content(content),
        content=content,
        has_image=bool(images),
        image_count=len(images),
        element_tag=element.name,
        classes=" ".join(element.get("class") or []),
    )


class SectionExtractor:
    """Run the strategy cascade over a parsed document.

    Args:
        strategies: Tiers in evaluation order.  Tests pass a single tier to
            check it in isolation.
        threshold: A tier runs only while fewer sections than this have
            been admitted.
        max_sections: Cap on the returned list.
    """

    def __init__(
        self,
        strategies: Iterable[SectionStrategy] = DEFAULT_STRATEGIES,
        threshold: int = TIER_THRESHOLD,
        max_sections: int = MAX_SECTIONS,
    ) -> None:
        self.strategies = tuple(strategies)
        self.threshold = threshold
        self.max_sections = max_sections

    def extract(self, soup: BeautifulSoup) -> list[ScannedSection]:
        sections: list[ScannedSection] = []
        processed: set[int] = set()

        for position, strategy in enumerate(self.strategies):
            # The first tier always runs; later ones only fill a thin result.
            if position > 0 and len(sections) >= self.threshold:
                break

            admitted = 0
            for element in strategy.candidates(soup):
                if id(element) in processed:
                    continue
                if strategy.accept is not None and not strategy.accept(element):
                    continue
                section = extract_section_data(element)
                if section is None or len(section.content) <= strategy.min_length:
                    continue
                sections.append(section)
                processed.add(id(element))
                admitted += 1

            logger.debug(f"Strategy {strategy.name} admitted {admitted} section(s)")

        sections.sort(key=lambda section: len(section.content), reverse=True)
        sections = sections[: self.max_sections]
        for index, section in enumerate(sections):
            section.index = index
        return sections

    def extract_from_html(self, html: str) -> list[ScannedSection]:
        return self.extract(BeautifulSoup(html, "html.parser"))
