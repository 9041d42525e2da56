"""Data models shared by the extractors, the prompt generator and the API.

``StyleDescriptor`` is a Pydantic model because it is built from untrusted
model output and must always come out in one normalised shape.  The other
records are plain dataclasses, produced and consumed by our own code.
"""

from __future__ import annotations

import json
import logging
import re
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_AESTHETIC = "modern, clean design"
DEFAULT_MOOD = "professional"
DEFAULT_COMPOSITION = "balanced layout"

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


class StyleDescriptor(BaseModel):
    """Structured description of a target visual style.

    Attributes:
        aesthetic: Overall look ("modern, minimal, tech-forward").
        mood: Emotional register ("professional, trustworthy").
        composition: Layout tendencies ("centered, clean backgrounds").
        color_palette: Colour literals or names, serialised as ``colorPalette``.
        typography: Font family names.
    """

    model_config = ConfigDict(populate_by_name=True)

    aesthetic: str = DEFAULT_AESTHETIC
    mood: str = DEFAULT_MOOD
    composition: str = DEFAULT_COMPOSITION
    color_palette: list[str] = Field(default_factory=list, alias="colorPalette")
    typography: list[str] = Field(default_factory=list)

    @field_validator("aesthetic", "mood", "composition", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value if item)
        return str(value).strip()

    @field_validator("color_palette", "typography", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [str(item).strip() for item in value if str(item).strip()]

    def to_api(self) -> dict:
        return self.model_dump(by_alias=True)


def normalize_style(data: dict | None, fallback: StyleDescriptor | None = None) -> StyleDescriptor:
    """Coerce a loosely shaped style dict into a :class:`StyleDescriptor`.

    Missing or empty fields are taken from *fallback* (or the defaults).
    Both ``colorPalette`` and ``color_palette`` spellings are accepted, and
    ``allColors``/``allFonts`` from the scraping step fill the palette and
    typography when the analysis did not provide them.
    """
    base = fallback or StyleDescriptor()
    data = data or {}

    palette = data.get("colorPalette") or data.get("color_palette") or data.get("allColors")
    typography = data.get("typography") or data.get("fonts") or data.get("allFonts")

    try:
        parsed = StyleDescriptor(
            aesthetic=data.get("aesthetic") or base.aesthetic,
            mood=data.get("mood") or base.mood,
            composition=data.get("composition") or base.composition,
            color_palette=palette if palette else base.color_palette,
            typography=typography if typography else base.typography,
        )
    except ValidationError:
        logger.warning(f"Style data could not be normalised, using fallback: {data!r}")
        return base.model_copy(deep=True)

    if not parsed.aesthetic:
        parsed.aesthetic = base.aesthetic
    if not parsed.mood:
        parsed.mood = base.mood
    if not parsed.composition:
        parsed.composition = base.composition
    return parsed


def parse_style_response(text: str, fallback: StyleDescriptor) -> tuple[StyleDescriptor, bool]:
    """Parse a model's style analysis answer.

    The first ``{...}`` block in *text* is decoded as JSON, so answers
    wrapped in prose or Markdown fences still parse.

    Returns:
        ``(descriptor, used_fallback)``.  When the answer holds no usable
        JSON object the fallback is returned and the flag is ``True`` so the
        caller can tell the user the style is a default, not an analysis.
    """
    match = _JSON_OBJECT_RE.search(text or "")
    if match:
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            data = None
        if isinstance(data, dict):
            return normalize_style(data, fallback), False

    logger.warning(f"Failed to parse style analysis response, using fallback: {(text or '')[:200]!r}")
    return fallback.model_copy(deep=True), True


def website_style_fallback(colors: list[str], fonts: list[str]) -> StyleDescriptor:
    """Default descriptor for a scanned website, seeded with its raw colours."""
    return StyleDescriptor(
        aesthetic="modern, clean",
        mood="professional",
        composition="structured layout",
        color_palette=colors[:6],
        typography=fonts,
    )


LIBRARY_STYLE_FALLBACK = StyleDescriptor(
    aesthetic="modern, clean design",
    mood="professional and elegant",
    composition="balanced and structured",
    color_palette=["#0066FF", "#FFFFFF", "#000000", "#808080"],
)


@dataclass
class ScannedSection:
    """A content-bearing block of a page, candidate for illustration."""

    title: str
    content: str
    has_image: bool
    image_count: int
    element_tag: str
    classes: str = ""
    index: int = 0

    def to_api(self) -> dict:
        return {
            "title": self.title,
            "content": self.content,
            "hasImage": self.has_image,
            "imageCount": self.image_count,
            "elementTag": self.element_tag,
            "classes": self.classes,
            "index": self.index,
        }


@dataclass
class HistoryEntry:
    """One generated image in the capped history log."""

    image_url: str
    prompt: str
    style: str = ""
    subject: str = ""
    model: str = ""
    size: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return asdict(self)

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "imageUrl": self.image_url,
            "prompt": self.prompt,
            "style": self.style,
            "subject": self.subject,
            "model": self.model,
            "size": self.size,
        }

    @classmethod
    def from_dict(cls, data: dict) -> HistoryEntry:
        known = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        return cls(**known)
