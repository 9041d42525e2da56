"""Turn colour literals into natural-language colour names.

Image models follow "light blue and dark gray" far more reliably than
``#6fa8dc, #333333``, so palette entries are named before they go into a
prompt.  The naming is a coarse heuristic:

- channel spread (max - min) under 30 is treated as a gray, banded by
  lightness into white / light gray / medium gray / dark gray / black
- otherwise the dominant channel picks the hue family, and the order of
  the other two channels picks within it (red vs orange, green vs cyan,
  blue vs purple)
- a ``light`` or ``dark`` qualifier is added at the lightness extremes
"""

from __future__ import annotations

import colorsys
import re

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def parse_color(color: str) -> tuple[int, int, int] | None:
    """Parse ``#rgb``, ``#rrggbb``, ``rgb()/rgba()`` or ``hsl()/hsla()``.

    Returns:
        ``(r, g, b)`` in 0-255, or ``None`` when *color* is not a literal.
    """
    value = color.strip().lower()

    if value.startswith("#"):
        digits = value[1:]
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits[:3])
        if len(digits) < 6:
            return None
        try:
            return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
        except ValueError:
            return None

    numbers = [float(n) for n in _NUMBER_RE.findall(value)]
    if value.startswith("rgb") and len(numbers) >= 3:
        r, g, b = (max(0, min(255, round(n))) for n in numbers[:3])
        return r, g, b

    if value.startswith("hsl") and len(numbers) >= 3:
        hue, saturation, lightness = numbers[:3]
        r, g, b = colorsys.hls_to_rgb(
            (hue % 360) / 360.0,
            max(0.0, min(100.0, lightness)) / 100.0,
            max(0.0, min(100.0, saturation)) / 100.0,
        )
        return round(r * 255), round(g * 255), round(b * 255)

    return None


def rgb_to_color_name(r: int, g: int, b: int) -> str:
    """Name an RGB triple with the hue/lightness heuristic."""
    high = max(r, g, b)
    low = min(r, g, b)
    lightness = (high + low) / 2 / 255

    if high - low < 30:
        if lightness > 0.8:
            return "white"
        if lightness > 0.6:
            return "light gray"
        if lightness > 0.4:
            return "medium gray"
        if lightness > 0.2:
            return "dark gray"
        return "black"

    if r > g and r > b:
        hue = "orange" if g > b else "red"
    elif g > r and g > b:
        hue = "cyan" if b > r else "green"
    elif b > r and b > g:
        hue = "purple" if r > g else "blue"
    # Two channels tied for the maximum.
    elif r == g:
        hue = "yellow"
    elif g == b:
        hue = "cyan"
    else:
        hue = "magenta"

    if lightness > 0.7:
        return f"light {hue}"
    if lightness < 0.3:
        return f"dark {hue}"
    return hue


def color_to_name(color: str) -> str:
    """Name one palette entry.

    Entries that are not colour literals ("forest green") are returned as
    they are; unparseable literals become ``"neutral"``.
    """
    value = color.strip()
    if not value.lower().startswith(("#", "rgb", "hsl")):
        return value
    rgb = parse_color(value)
    if rgb is None:
        return "neutral"
    return rgb_to_color_name(*rgb)


def convert_colors_to_names(colors: list[str]) -> list[str]:
    """Name every entry of *colors*, dropping duplicate names in order."""
    names: list[str] = []
    for color in colors:
        name = color_to_name(color)
        if name and name not in names:
            names.append(name)
    return names
