"""Preset style library loaded from ``styles.json``.

Each preset (``v1``, ``v2``, ``v3``...) describes a house style:

- ``style_global`` - aesthetic, colour palette, mood, lighting,
  composition, dimensions and key effects
- ``brand_identity.visual_language`` - one-line art direction
- ``images`` - templates for typical page slots, each with up to a few
  ``key_elements`` and an optional ``avoid`` override

Styles that do not come from this file (scanned websites, uploads, stock
library selections) are identified by a prefix and described by a
:class:`~artdirector.core.models.StyleDescriptor` instead.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from artdirector.core.errors import StyleNotFoundError
from artdirector.core.models import StyleDescriptor

logger = logging.getLogger(__name__)

CUSTOM_STYLE_PREFIXES = ("scanned-", "uploaded-", "library-")
DEFAULT_STYLE_NAME = "Modern and professional"


def is_custom_style(style_id: str) -> bool:
    return style_id.startswith(CUSTOM_STYLE_PREFIXES)


@dataclass
class GlobalStyle:
    """Flattened style data the prompt generator reads from."""

    aesthetic: str = ""
    mood: str = ""
    composition: str = ""
    color_palette: list[str] = field(default_factory=list)
    lighting: str = ""
    dimensions: str = ""
    key_effects: list[str] = field(default_factory=list)
    visual_language: str = ""

    @classmethod
    def from_descriptor(cls, descriptor: StyleDescriptor) -> GlobalStyle:
        return cls(
            aesthetic=descriptor.aesthetic,
            mood=descriptor.mood,
            composition=descriptor.composition,
            color_palette=list(descriptor.color_palette[:6]),
            lighting="natural, balanced lighting",
            dimensions="1024x1024 (default)",
            visual_language=f"{descriptor.aesthetic}, {descriptor.mood}",
        )


@dataclass
class StyleTemplate:
    """A template for one kind of page image within a preset."""

    id: str
    section: str = ""
    context: str = ""
    key_elements: list[str] = field(default_factory=list)
    avoid: str = ""


class StylePresets:
    """Read-only access to the preset table.

    Args:
        data: Parsed ``styles.json`` content, keyed by style id.
    """

    def __init__(self, data: dict) -> None:
        self._data = data

    @classmethod
    def from_file(cls, path: Path) -> StylePresets:
        """Load presets from *path*; a missing or invalid file yields no presets."""
        if not path.exists():
            logger.warning(f"Style presets file not found: {path}")
            return cls({})
        try:
            with open(path, encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load style presets from {path}: {e}")
            return cls({})
        if not isinstance(data, dict):
            logger.error(f"Style presets file {path} does not hold an object")
            return cls({})
        return cls(data)

    def ids(self) -> list[str]:
        return list(self._data.keys())

    def style_name(self, style_id: str) -> str:
        """Display name used in analysis instructions ("3D Isometric - ...")."""
        entry = self._data.get(style_id)
        if not entry:
            return DEFAULT_STYLE_NAME
        name = entry.get("name", style_id)
        description = entry.get("description")
        return f"{name} - {description}" if description else name

    def global_style(self, style_id: str) -> GlobalStyle:
        """Return the flattened global style of a preset.

        Raises:
            StyleNotFoundError: If *style_id* is not a known preset.
        """
        entry = self._data.get(style_id)
        if entry is None:
            raise StyleNotFoundError(f"Unknown style: {style_id}")

        style_global = entry.get("style_global") or {}
        brand_identity = entry.get("brand_identity") or {}
        return GlobalStyle(
            aesthetic=style_global.get("aesthetic", ""),
            mood=style_global.get("mood", ""),
            composition=style_global.get("composition", ""),
            color_palette=list(style_global.get("color_palette") or []),
            lighting=style_global.get("lighting", ""),
            dimensions=style_global.get("dimensions", ""),
            key_effects=list(style_global.get("key_effects") or []),
            visual_language=brand_identity.get("visual_language", ""),
        )

    def template(self, style_id: str, template_id: str) -> StyleTemplate:
        """Return one template of a preset.

        Raises:
            StyleNotFoundError: If the style or the template is unknown.
        """
        entry = self._data.get(style_id)
        if entry is None:
            raise StyleNotFoundError(f"Unknown style: {style_id}")
        for image in entry.get("images") or []:
            if image.get("id") == template_id:
                return StyleTemplate(
                    id=image["id"],
                    section=image.get("section", ""),
                    context=image.get("context", ""),
                    key_elements=list(image.get("key_elements") or []),
                    avoid=image.get("avoid", ""),
                )
        raise StyleNotFoundError(f"Unknown template '{template_id}' for style {style_id}")

    def list_styles(self) -> list[dict]:
        """Summaries of every preset and its templates, for the frontend."""
        styles = []
        for style_id, entry in self._data.items():
            styles.append(
                {
                    "id": style_id,
                    "name": entry.get("name", style_id),
                    "description": entry.get("description", ""),
                    "templates": [
                        {
                            "id": image.get("id"),
                            "section": image.get("section", ""),
                            "context": image.get("context", ""),
                        }
                        for image in entry.get("images") or []
                    ],
                }
            )
        return styles
