"""Regex-based image extraction from raw HTML.

The extractor scans page markup for three kinds of image references:

- ``<img src="...">``
- ``<img srcset="a.jpg 1x, b.jpg 2x">`` (every candidate URL, descriptor dropped)
- CSS ``background-image: url(...)`` declarations

Each reference is resolved against the page URL, filtered (image extension,
noise patterns, declared size) and deduplicated.  Two URLs that only differ
by resize parameters (``?w=300`` vs ``?w=1200``) count as the same image.

No network access happens here: fetching the page is the job of
:class:`~artdirector.core.adapters.web.WebPageFetcher`.

Usage
-----
::

    images = extract_images(html, "https://example.com/blog/post")
    for image in images:
        print(image.url, image.alt)
"""

from __future__ import annotations

import html as html_lib
import re
from dataclasses import asdict, dataclass
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp", ".avif")

# Substrings marking icons, trackers and placeholders rather than content images.
NOISE_PATTERNS = (
    "favicon",
    "sprite",
    "spacer",
    "blank.gif",
    "placeholder",
    "1x1",
    "pixel.gif",
    "tracking",
    "data:",
)

RESIZE_PARAMS = frozenset(
    {
        "w",
        "h",
        "width",
        "height",
        "size",
        "quality",
        "q",
        "fit",
        "crop",
        "dpr",
        "auto",
        "fm",
        "format",
        "resize",
        "scale",
    }
)

_IMG_TAG_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_BACKGROUND_RE = re.compile(
    r"background-image\s*:\s*url\(\s*[\"']?([^\"')]+?)[\"']?\s*\)", re.IGNORECASE
)


def _attr_pattern(name: str) -> re.Pattern[str]:
    # Quoted or bare attribute value; the leading \s keeps "src" from matching "data-src".
    return re.compile(
        rf"""\s{name}\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""",
        re.IGNORECASE,
    )


_SRC_RE = _attr_pattern("src")
_SRCSET_RE = _attr_pattern("srcset")
_ALT_RE = _attr_pattern("alt")
_WIDTH_RE = _attr_pattern("width")
_HEIGHT_RE = _attr_pattern("height")


@dataclass
class ExtractedImage:
    """One image reference found in a page."""

    url: str
    alt: str = ""
    width: int | None = None
    height: int | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def _attr(tag: str, pattern: re.Pattern[str]) -> str | None:
    match = pattern.search(tag)
    if not match:
        return None
    value = next(group for group in match.groups() if group is not None)
    return html_lib.unescape(value.strip())


def _dimension(tag: str, pattern: re.Pattern[str]) -> int | None:
    value = _attr(tag, pattern)
    if not value:
        return None
    digits = re.match(r"\d+", value)
    return int(digits.group(0)) if digits else None


def resolve_url(image_url: str, base_url: str) -> str:
    """Resolve an image reference against the page URL.

    Args:
        image_url: Raw reference from the markup.
        base_url: URL of the page the markup came from.

    Returns:
        The absolute URL.  Absolute references pass through unchanged,
        protocol-relative ones (``//cdn...``) adopt the page's scheme,
        root-relative ones (``/img/...``) adopt the page's origin and
        anything else is resolved relative to the page path.
    """
    image_url = image_url.strip()
    lowered = image_url.lower()
    if lowered.startswith(("http://", "https://")):
        return image_url

    base = urlsplit(base_url)
    if image_url.startswith("//"):
        return f"{base.scheme or 'https'}:{image_url}"
    if image_url.startswith("/"):
        return f"{base.scheme}://{base.netloc}{image_url}"
    return urljoin(base_url, image_url)


def is_valid_image_url(url: str) -> bool:
    """Return whether *url* looks like a content image worth keeping."""
    if not url:
        return False

    lowered = url.lower()
    if any(pattern in lowered for pattern in NOISE_PATTERNS):
        return False

    parts = urlsplit(lowered)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return False

    return any(ext in parts.path for ext in IMAGE_EXTENSIONS)


def normalize_image_url(url: str) -> str:
    """Strip resize-style query parameters so size variants compare equal."""
    parts = urlsplit(url)
    if not parts.query:
        return urlunsplit((parts.scheme, parts.netloc.lower(), parts.path, "", ""))

    kept = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key.lower() not in RESIZE_PARAMS
    ]
    return urlunsplit((parts.scheme, parts.netloc.lower(), parts.path, urlencode(kept), ""))


def split_srcset(srcset: str) -> list[str]:
    """Return the URL token of every candidate in a ``srcset`` value."""
    urls = []
    for candidate in srcset.split(","):
        tokens = candidate.strip().split()
        if tokens:
            urls.append(tokens[0])
    return urls


def extract_images(html: str, base_url: str, min_size: int = 50) -> list[ExtractedImage]:
    """Extract, resolve, filter and deduplicate image references.

    Args:
        html: Raw page markup.
        base_url: URL the markup was fetched from.
        min_size: Images whose declared width and height are both below
            this many pixels are dropped.  Images without declared
            dimensions are always kept.

    Returns:
        Images in document order (``<img>`` tags first, then CSS
        backgrounds), each with an absolute http(s) URL.
    """
    images: list[ExtractedImage] = []
    seen_urls: set[str] = set()
    seen_bases: set[str] = set()

    def add(raw_url: str, alt: str, width: int | None, height: int | None) -> None:
        if not raw_url or raw_url.lower().startswith("data:"):
            return
        url = resolve_url(raw_url, base_url)
        if not is_valid_image_url(url):
            return
        image = ExtractedImage(url=url, alt=alt, width=width, height=height)
        # A filtered variant must not claim the base URL of a larger one.
        if _below_min_size(image, min_size):
            return
        base = normalize_image_url(url)
        if url in seen_urls or base in seen_bases:
            return
        seen_urls.add(url)
        seen_bases.add(base)
        images.append(image)

    for tag_match in _IMG_TAG_RE.finditer(html):
        tag = tag_match.group(0)
        alt = _attr(tag, _ALT_RE) or ""
        width = _dimension(tag, _WIDTH_RE)
        height = _dimension(tag, _HEIGHT_RE)

        src = _attr(tag, _SRC_RE)
        if src:
            add(src, alt, width, height)

        srcset = _attr(tag, _SRCSET_RE)
        if srcset:
            for candidate in split_srcset(srcset):
                add(candidate, alt, width, height)

    for bg_match in _BACKGROUND_RE.finditer(html):
        add(html_lib.unescape(bg_match.group(1)), "Background image", None, None)

    return images


def _below_min_size(image: ExtractedImage, min_size: int) -> bool:
    if image.width is None or image.height is None:
        return False
    return image.width < min_size and image.height < min_size
