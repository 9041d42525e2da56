"""Heuristic colour and font extraction from raw HTML.

The candidates produced here are a signal for the style analysis model, not
the style itself.  The model's JSON answer is turned into a
:class:`~artdirector.core.models.StyleDescriptor` by
:func:`~artdirector.core.models.parse_style_response`.
"""

from __future__ import annotations

import html as html_lib
import re
from dataclasses import asdict, dataclass, field
from urllib.parse import parse_qs, urlsplit

MAX_COLORS = 15
MAX_FONTS = 8

GENERIC_FONT_FAMILIES = frozenset(
    {
        "sans-serif",
        "serif",
        "monospace",
        "cursive",
        "fantasy",
        "system-ui",
        "ui-sans-serif",
        "ui-serif",
        "ui-monospace",
        "inherit",
        "initial",
        "unset",
    }
)

_COLOR_RE = re.compile(
    r"(?<![\w&])#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})(?![\w-])"
    r"|\brgba?\(\s*[^()]*?\)"
    r"|\bhsla?\(\s*[^()]*?\)",
    re.IGNORECASE,
)
_STYLE_BLOCK_RE = re.compile(r"<style\b[^>]*>(.*?)</style>", re.IGNORECASE | re.DOTALL)
_STYLE_ATTR_RE = re.compile(r"""\sstyle\s*=\s*(?:"([^"]*)"|'([^']*)')""", re.IGNORECASE)
_THEME_COLOR_RE = re.compile(
    r"""<meta\b[^>]*name\s*=\s*["']theme-color["'][^>]*>""", re.IGNORECASE
)
_CONTENT_ATTR_RE = re.compile(r"""content\s*=\s*["']([^"']*)["']""", re.IGNORECASE)
_FONT_FAMILY_RE = re.compile(
    r"""font-family\s*:\s*((?:"[^"]*"|'[^']*'|[^;}"'])+)""", re.IGNORECASE
)
_FONT_URL_RE = re.compile(
    r"""(?:href\s*=\s*|@import\s+(?:url\(\s*)?)["']?([^"')\s>]*family=[^"')\s>]*)""",
    re.IGNORECASE,
)


@dataclass
class StyleCandidates:
    """Bounded colour and font candidates scraped from a page."""

    colors: list[str] = field(default_factory=list)
    fonts: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _append_unique(target: list[str], value: str, limit: int) -> None:
    if len(target) >= limit or not value:
        return
    if value.lower() not in {item.lower() for item in target}:
        target.append(value)


def _css_text(html: str) -> str:
    """Collect the CSS-bearing parts of a document."""
    chunks = [match.group(1) for match in _STYLE_BLOCK_RE.finditer(html)]
    for match in _STYLE_ATTR_RE.finditer(html):
        chunks.append(match.group(1) if match.group(1) is not None else match.group(2))
    for meta in _THEME_COLOR_RE.finditer(html):
        content = _CONTENT_ATTR_RE.search(meta.group(0))
        if content:
            chunks.append(content.group(1))
    return "\n".join(html_lib.unescape(chunk) for chunk in chunks)


def extract_colors(html: str, limit: int = MAX_COLORS) -> list[str]:
    """Return up to *limit* distinct colour literals.

    Only CSS contexts are scanned when the document has any, which keeps
    fragment links such as ``href="#add"`` out of the result.
    """
    source = _css_text(html) or html
    colors: list[str] = []
    for match in _COLOR_RE.finditer(source):
        _append_unique(colors, re.sub(r"\s+", " ", match.group(0).strip()), limit)
        if len(colors) >= limit:
            break
    return colors


def _first_family(declaration: str) -> str:
    first = declaration.split(",")[0]
    return first.strip().strip("\"'").strip()


def _families_from_url(url: str) -> list[str]:
    query = urlsplit(html_lib.unescape(url)).query
    families = []
    for value in parse_qs(query).get("family", []):
        # css (v1) packs several families with "|"; css2 repeats the parameter.
        for family in value.split("|"):
            name = family.split(":")[0].strip()
            if name:
                families.append(name)
    return families


def extract_fonts(html: str, limit: int = MAX_FONTS) -> list[str]:
    """Return up to *limit* distinct font family names.

    Sources, in order: ``font-family`` declarations (first family only,
    generic families skipped), then the ``family=`` parameter of font
    stylesheet links and ``@import`` rules (Google Fonts and compatible
    hosts).
    """
    fonts: list[str] = []

    for match in _FONT_FAMILY_RE.finditer(_css_text(html) or html):
        family = _first_family(match.group(1))
        if family.lower() in GENERIC_FONT_FAMILIES or family.lower().startswith("var("):
            continue
        _append_unique(fonts, family, limit)

    for match in _FONT_URL_RE.finditer(html):
        for family in _families_from_url(match.group(1)):
            _append_unique(fonts, family, limit)

    return fonts


def extract_style_candidates(html: str) -> StyleCandidates:
    """Extract both colour and font candidates from *html*."""
    return StyleCandidates(colors=extract_colors(html), fonts=extract_fonts(html))
