"""Deterministic prompt composition for style-consistent image generation.

A prompt merges a style (preset or custom) with the user's subject.  The
same inputs always produce the same string; the only non-deterministic path
is the optional AI enrichment, which falls back to the deterministic prompt
whenever it fails.

Prompt Structure
----------------
::

    [Style opener: fixed phrase per preset, or "Illustration in the
     following style" for custom styles, with aesthetic / mood /
     composition or key effects]
    [Using predominant colors: <named colours>.] [Lighting: ...]

    Subject: <subject>

    Key visual elements to incorporate:        (template only)
    - <element 1..3>

    Avoid: <template avoid text or the default list>

    Technical specifications: Dimensions: ... High-resolution,
    professional quality. Visual language: ...

Colours are named (``light blue``, ``dark gray``) rather than quoted as hex
codes; see :mod:`artdirector.core.color_names`.

Usage
-----
::

    generator = PromptGenerator(StylePresets.from_file(path))
    prompt = generator.generate_prompt("v1", "A team planning a product launch")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artdirector.core.color_names import convert_colors_to_names
from artdirector.core.errors import PromptError, ProviderError
from artdirector.core.models import StyleDescriptor
from artdirector.core.style_presets import (
    GlobalStyle,
    StylePresets,
    StyleTemplate,
    is_custom_style,
)

if TYPE_CHECKING:
    from artdirector.core.adapters.openai import OpenAIAdapter

logger = logging.getLogger(__name__)

MAX_PROMPT_COLORS = 5
MAX_TEMPLATE_ELEMENTS = 3

DEFAULT_AVOID = (
    "Stock photos",
    "Clipart",
    "Human faces",
    "Illegible text",
    "Overly complex elements",
    "Generic imagery",
)

_PRESET_OPENERS = {
    "v1": "Modern 3D isometric illustration with clean vector art aesthetic. ",
    "v2": (
        "Minimalist glassmorphism illustration with frosted glass effects "
        "and elegant transparency. "
    ),
    "v3": "Abstract fluid art illustration with organic flowing shapes and gradient mesh. ",
}

ENRICH_SYSTEM_MESSAGE = (
    "You are an expert prompt writer for image generation models. Take a base prompt "
    "describing a visual style and a subject and rewrite it into an optimal prompt that "
    "preserves the art direction exactly while illustrating the subject creatively. "
    "Keep the style, colors, lighting and composition consistent."
)

ENRICH_USER_TEMPLATE = (
    "Here is the base prompt to enrich:\n\n{prompt}\n\n"
    "Write an optimized image prompt that:\n"
    "1. Preserves the described visual style EXACTLY\n"
    "2. Illustrates the subject in a creative and relevant way\n"
    "3. Keeps the art direction consistent\n"
    "4. Is clear, precise and detailed\n"
    "5. Does not exceed 1000 characters\n\n"
    "Return only the final prompt, with no introduction or explanation."
)


class PromptGenerator:
    """Compose prompts from the preset table or a custom style descriptor.

    Args:
        presets: Preset style table.
    """

    def __init__(self, presets: StylePresets) -> None:
        self.presets = presets

    def resolve_style(
        self, style_id: str, custom_style: StyleDescriptor | None = None
    ) -> GlobalStyle:
        """Return the style data for *style_id*.

        Raises:
            PromptError: If a custom style id comes without style data.
            StyleNotFoundError: If a preset id is unknown.
        """
        if is_custom_style(style_id):
            if custom_style is None:
                raise PromptError(f"Style data is required for custom style {style_id}")
            return GlobalStyle.from_descriptor(custom_style)
        return self.presets.global_style(style_id)

    def generate_prompt(
        self,
        style_id: str,
        subject: str,
        template_id: str | None = None,
        custom_style: StyleDescriptor | None = None,
    ) -> str:
        """Build the full prompt for one image.

        Args:
            style_id: Preset id (``v1``...) or custom id (``scanned-...``,
                ``uploaded-...``, ``library-...``).
            subject: What the image should show.
            template_id: Optional preset template contributing key
                elements and an avoid list.  Ignored for custom styles.
            custom_style: Descriptor for custom styles.

        Returns:
            The prompt, stripped of surrounding whitespace.

        Raises:
            PromptError: Missing style or subject, or custom style without data.
            StyleNotFoundError: Unknown preset or template.
        """
        subject = (subject or "").strip()
        if not style_id or not subject:
            raise PromptError("Style and subject are required to generate a prompt")

        style = self.resolve_style(style_id, custom_style)
        template: StyleTemplate | None = None
        if template_id and not is_custom_style(style_id):
            template = self.presets.template(style_id, template_id)

        prompt = self.build_base_prompt(style, style_id)
        prompt += f"\n\nSubject: {subject}"

        if template and template.key_elements:
            prompt += "\n\nKey visual elements to incorporate:"
            for element in template.key_elements[:MAX_TEMPLATE_ELEMENTS]:
                prompt += f"\n- {element}"

        prompt += self.build_avoidance(template)
        prompt += self.build_technical_specs(style)
        return prompt.strip()

    def build_base_prompt(self, style: GlobalStyle, style_id: str) -> str:
        if is_custom_style(style_id):
            prompt = "Illustration in the following style: "
            prompt += f"Aesthetic: {style.aesthetic}. "
            prompt += f"Mood: {style.mood}. "
            prompt += f"Composition: {style.composition}. "
        else:
            prompt = _PRESET_OPENERS.get(style_id, "Illustration. ")
            prompt += f"Style: {style.aesthetic}. "
            prompt += f"Mood: {style.mood}. "
            if style_id == "v2":
                prompt += f"Key effects: {', '.join(style.key_effects)}. "
            elif style_id == "v3":
                prompt += (
                    "Visual language: Fluid, organic, artistic with smooth color blending. "
                )
            else:
                prompt += f"Composition: {style.composition}. "

        if style.color_palette:
            names = convert_colors_to_names(style.color_palette[:MAX_PROMPT_COLORS])
            prompt += f"Using predominant colors: {', '.join(names)}. "

        if style.lighting:
            prompt += f"Lighting: {style.lighting}. "

        return prompt

    @staticmethod
    def build_avoidance(template: StyleTemplate | None) -> str:
        if template and template.avoid:
            return f"\n\nAvoid: {template.avoid}"
        return f"\n\nAvoid: {', '.join(DEFAULT_AVOID)}"

    @staticmethod
    def build_technical_specs(style: GlobalStyle) -> str:
        specs = "\n\nTechnical specifications: "
        if style.dimensions:
            specs += f"Dimensions: {style.dimensions}. "
        specs += "High-resolution, professional quality. "
        specs += f"Visual language: {style.visual_language}. "
        return specs


async def enrich_prompt(prompt: str, client: OpenAIAdapter) -> tuple[str, bool]:
    """Ask a text model to elaborate *prompt*.

    Returns:
        ``(prompt, enriched)``.  On any provider failure, or an empty
        answer, the deterministic prompt comes back with ``enriched=False``.
    """
    try:
        answer = await client.chat(
            [
                {"role": "system", "content": ENRICH_SYSTEM_MESSAGE},
                {"role": "user", "content": ENRICH_USER_TEMPLATE.format(prompt=prompt)},
            ],
            model=client.config.vision_model,
            temperature=0.7,
            max_tokens=500,
        )
    except ProviderError as e:
        logger.warning(f"Prompt enrichment failed, using deterministic prompt: {e}")
        return prompt, False

    answer = answer.strip()
    if not answer:
        logger.warning("Prompt enrichment returned nothing, using deterministic prompt")
        return prompt, False
    return answer, True
