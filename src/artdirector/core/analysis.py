"""Model-backed analysis steps.

Each function here wraps one model call: its instructions, its parameters
and the interpretation of the answer.  The functions take an
:class:`~artdirector.core.adapters.openai.OpenAIAdapter` (or anything with
the same ``chat``/``vision``/``config`` surface) so tests can pass a fake.

Style analyses never fail on an unreadable answer: they fall back to a
default descriptor and report ``used_fallback=True``.  Provider failures
propagate as :class:`~artdirector.core.errors.ProviderError`.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from artdirector.core.errors import PromptError, ProviderError
from artdirector.core.models import (
    LIBRARY_STYLE_FALLBACK,
    StyleDescriptor,
    parse_style_response,
    website_style_fallback,
)
from artdirector.core.style_extractor import StyleCandidates

if TYPE_CHECKING:
    from artdirector.core.adapters.openai import OpenAIAdapter

logger = logging.getLogger(__name__)

SECTION_PREVIEW_LENGTH = 200
MAX_LIBRARY_IMAGES = 4

SUGGESTIONS_SYSTEM_TEMPLATE = """You are an art director and visual content expert.
Your task is to analyse web page sections and decide:
1. Whether a section REALLY needs an image (not every section does)
2. If so, which kind of image would be most relevant
3. A suggested subject for that image

Be selective: only suggest images where they add real value.

Visual style to respect: {style_name}"""

SUGGESTIONS_USER_TEMPLATE = """Analyse these web page sections and suggest images ONLY where relevant.

Visual style to use: {style_name}

Sections to analyse:
{sections}

For each section that DESERVES an image, return JSON in this format:
{{
  "suggestions": [
    {{
      "sectionIndex": 0,
      "sectionTitle": "Section title",
      "needsImage": true,
      "reason": "Why this section needs an image",
      "imageSubject": "Description of the subject to illustrate",
      "priority": "high|medium|low"
    }}
  ]
}}

Return ONLY the JSON, with no text before or after."""

SUBJECT_SYSTEM_MESSAGE = """You are an expert in data analysis and image prompt writing.
Your task is to read context extracted from a CSV row and derive a clear subject for an image.

The subject must be:
- Descriptive and precise
- Based on ALL of the contextual information
- Suited to image generation (visual, concrete)
- At most 100 words"""

SUBJECT_USER_TEMPLATE = (
    "Context extracted from the CSV:\n\n{context}\n\n"
    "Extract the main subject for an image that visually represents this context.\n"
    "Return ONLY the subject, with no introduction or explanation."
)

WEBSITE_SYSTEM_MESSAGE = "You are a design expert who analyses the visual style of websites."

WEBSITE_USER_TEMPLATE = """Analyse this website ({url}) using this data:
Colors: {colors}
Fonts: {fonts}

Describe its style as a JSON object with:
- aesthetic: string (e.g. "modern, minimal, tech-forward")
- mood: string (e.g. "professional, trustworthy")
- composition: string (e.g. "centered, clean backgrounds")
- colorPalette: array of at most 6 hex colors"""

LIBRARY_STYLE_TEMPLATE = """Analyze the visual style of these {count} image(s). Extract and describe:
1. Overall aesthetic and design style
2. Color palette (list main colors)
3. Mood and atmosphere
4. Visual composition and layout style
5. Artistic direction

Return ONLY a JSON object with this exact structure:
{{
  "aesthetic": "brief description of the overall style",
  "mood": "mood and atmosphere",
  "composition": "composition and layout style",
  "colorPalette": ["color1", "color2", "color3", "color4", "color5", "color6"]
}}"""

DESCRIBE_IMAGE_PROMPT = """Describe this image in detail:
1. The main subject (objects, people, scene)
2. The dominant colors
3. The style and atmosphere
4. The composition and framing
5. The important elements to keep

Be precise and descriptive enough for the image to be recreated."""

DEFAULT_MODIFY_STYLE = "modern and professional"


def format_sections(sections: list[dict[str, Any]]) -> str:
    blocks = []
    for position, section in enumerate(sections, start=1):
        content = str(section.get("content") or "")[:SECTION_PREVIEW_LENGTH]
        has_image = "Yes" if section.get("hasImage") else "No"
        blocks.append(
            f'Section {position}: "{section.get("title", "")}"\n'
            f"Content: {content}...\n"
            f"Already has an image: {has_image}"
        )
    return "\n\n".join(blocks)


async def suggest_section_images(
    client: OpenAIAdapter, sections: list[dict[str, Any]], style_name: str
) -> tuple[list[dict[str, Any]], bool]:
    """Ask the vision model which sections deserve an image.

    Returns:
        ``(suggestions, used_fallback)``.  An answer that is not a JSON
        object gives no suggestions and ``used_fallback=True``.
    """
    logger.info(f"Analysing {len(sections)} section(s) for image suggestions")
    answer = await client.chat(
        [
            {"role": "system", "content": SUGGESTIONS_SYSTEM_TEMPLATE.format(style_name=style_name)},
            {
                "role": "user",
                "content": SUGGESTIONS_USER_TEMPLATE.format(
                    style_name=style_name, sections=format_sections(sections)
                ),
            },
        ],
        model=client.config.vision_model,
        temperature=0.7,
        max_tokens=2000,
        response_format={"type": "json_object"},
    )

    try:
        result = json.loads(answer)
    except json.JSONDecodeError:
        logger.warning(f"Section analysis answer is not JSON: {answer[:200]!r}")
        return [], True

    suggestions = result.get("suggestions") if isinstance(result, dict) else None
    if not isinstance(suggestions, list):
        return [], False
    logger.info(f"Section analysis returned {len(suggestions)} suggestion(s)")
    return suggestions, False


async def extract_subject(client: OpenAIAdapter, context: str) -> str:
    """Turn a CSV row context into an image subject.

    Raises:
        PromptError: Empty context, or the model returned no subject.
        ProviderError: The model call failed.
    """
    if not context.strip():
        raise PromptError("No context found to generate an image for this row")

    subject = await client.chat(
        [
            {"role": "system", "content": SUBJECT_SYSTEM_MESSAGE},
            {"role": "user", "content": SUBJECT_USER_TEMPLATE.format(context=context)},
        ],
        model=client.config.text_model,
        temperature=0.5,
        max_tokens=150,
    )
    subject = subject.strip()
    if not subject:
        raise PromptError("The model returned no subject for this row")
    logger.debug(f"Extracted subject: {subject}")
    return subject


async def analyze_website_style(
    client: OpenAIAdapter, url: str, candidates: StyleCandidates
) -> tuple[StyleDescriptor, bool]:
    """Describe a website's style from its scraped colours and fonts."""
    fallback = website_style_fallback(candidates.colors, candidates.fonts)
    answer = await client.chat(
        [
            {"role": "system", "content": WEBSITE_SYSTEM_MESSAGE},
            {
                "role": "user",
                "content": WEBSITE_USER_TEMPLATE.format(
                    url=url,
                    colors=", ".join(candidates.colors),
                    fonts=", ".join(candidates.fonts),
                ),
            },
        ],
        model=client.config.text_model,
        temperature=0.7,
    )
    descriptor, used_fallback = parse_style_response(answer, fallback)
    if not descriptor.typography:
        descriptor.typography = list(candidates.fonts)
    return descriptor, used_fallback


async def analyze_library_style(
    client: OpenAIAdapter, image_urls: list[str]
) -> tuple[StyleDescriptor, bool]:
    """Describe the shared style of up to four stock photos."""
    urls = image_urls[:MAX_LIBRARY_IMAGES]
    logger.info(f"Analysing the style of {len(urls)} library image(s)")
    answer = await client.vision(
        LIBRARY_STYLE_TEMPLATE.format(count=len(image_urls)),
        urls,
        max_tokens=500,
        detail="low",
    )
    return parse_style_response(answer, LIBRARY_STYLE_FALLBACK)


async def describe_image(client: OpenAIAdapter, image_url: str) -> str:
    """Describe an image in enough detail to recreate it.

    Raises:
        ProviderError: The model call failed or returned nothing.
    """
    description = (await client.vision(DESCRIBE_IMAGE_PROMPT, [image_url], max_tokens=500)).strip()
    if not description:
        raise ProviderError("The vision model returned no description", status_code=502, provider="OpenAI")
    logger.info(f"Image described: {description[:100]}...")
    return description


def build_modification_prompt(
    description: str, modification: str, style: StyleDescriptor | None = None
) -> str:
    """Compose the regeneration prompt for an analysed image."""
    style_text = style.aesthetic if style and style.aesthetic else DEFAULT_MODIFY_STYLE
    palette = style.color_palette if style else []

    lines = [
        f'Based on this image description: "{description}"',
        "",
        f"Apply these modifications: {modification}",
        "",
        f"Style to maintain: {style_text}",
    ]
    if palette:
        lines.append(f"Color palette: {', '.join(palette)}")
    lines += [
        "",
        "Create a high-quality image that preserves the core elements but applies the "
        "requested modifications while matching the specified visual style.",
    ]
    return "\n".join(lines)
