"""Unit tests for prompt composition and enrichment."""

import asyncio

import pytest

from artdirector.core.errors import PromptError, ProviderError, StyleNotFoundError
from artdirector.core.models import StyleDescriptor
from artdirector.core.prompt_generator import DEFAULT_AVOID, PromptGenerator, enrich_prompt

SUBJECT = "A team planning a product launch"


@pytest.fixture
def generator(presets):
    return PromptGenerator(presets)


@pytest.fixture
def brutalist() -> StyleDescriptor:
    return StyleDescriptor(
        aesthetic="bold brutalist",
        mood="edgy",
        composition="asymmetric grid",
        color_palette=["#000000", "#FF0000"],
    )


class TestPresetPrompts:
    def test_same_inputs_same_prompt(self, generator):
        assert generator.generate_prompt("v1", SUBJECT) == generator.generate_prompt("v1", SUBJECT)

    def test_v1_structure(self, generator):
        prompt = generator.generate_prompt("v1", SUBJECT)
        assert prompt.startswith("Modern 3D isometric illustration with clean vector art aesthetic.")
        assert "Composition: centered isometric object" in prompt
        assert "Using predominant colors: blue, purple, white, black." in prompt
        assert "Lighting: soft studio lighting" in prompt
        assert f"\n\nSubject: {SUBJECT}" in prompt
        assert f"\n\nAvoid: {', '.join(DEFAULT_AVOID)}" in prompt
        assert "Dimensions: 1024x1024." in prompt
        assert prompt.endswith("Visual language: modern SaaS illustration, precise and friendly.")

    def test_colors_are_named_not_quoted(self, generator):
        assert "#2563EB" not in generator.generate_prompt("v1", SUBJECT)

    def test_v2_lists_key_effects(self, generator):
        prompt = generator.generate_prompt("v2", SUBJECT)
        assert prompt.startswith("Minimalist glassmorphism illustration")
        assert "Key effects: frosted glass blur, soft inner glow, thin luminous borders." in prompt

    def test_v3_uses_visual_language_line(self, generator):
        prompt = generator.generate_prompt("v3", SUBJECT)
        assert "Visual language: Fluid, organic, artistic with smooth color blending." in prompt
        assert "Composition:" not in prompt

    def test_subject_is_trimmed(self, generator):
        assert f"Subject: {SUBJECT}\n" in generator.generate_prompt("v1", f"  {SUBJECT}  ")


class TestTemplates:
    def test_first_three_key_elements_and_avoid(self, generator):
        prompt = generator.generate_prompt("v1", SUBJECT, template_id="hero")
        assert "Key visual elements to incorporate:" in prompt
        assert "- Central isometric platform holding the main object" in prompt
        assert "- Small decorative cubes in the background" not in prompt
        assert "Avoid: Stock photos, Human faces, Illegible text, Cluttered backgrounds" in prompt

    def test_template_without_avoid_uses_default(self, generator):
        prompt = generator.generate_prompt("v1", SUBJECT, template_id="feature")
        assert f"Avoid: {', '.join(DEFAULT_AVOID)}" in prompt

    def test_unknown_template(self, generator):
        with pytest.raises(StyleNotFoundError):
            generator.generate_prompt("v1", SUBJECT, template_id="missing")


class TestCustomStyles:
    def test_descriptor_drives_prompt(self, generator, brutalist):
        prompt = generator.generate_prompt("scanned-example.com", SUBJECT, custom_style=brutalist)
        assert prompt.startswith(
            "Illustration in the following style: Aesthetic: bold brutalist. "
            "Mood: edgy. Composition: asymmetric grid."
        )
        assert "Using predominant colors: black, red." in prompt
        assert "Lighting: natural, balanced lighting." in prompt
        assert "Dimensions: 1024x1024 (default)." in prompt
        assert prompt.endswith("Visual language: bold brutalist, edgy.")

    def test_template_ignored_for_custom_styles(self, generator, brutalist):
        prompt = generator.generate_prompt(
            "library-1", SUBJECT, template_id="hero", custom_style=brutalist
        )
        assert "Key visual elements" not in prompt

    def test_custom_style_requires_descriptor(self, generator):
        with pytest.raises(PromptError):
            generator.generate_prompt("uploaded-42", SUBJECT)


class TestInvalidInput:
    def test_unknown_preset(self, generator):
        with pytest.raises(StyleNotFoundError):
            generator.generate_prompt("v9", SUBJECT)

    @pytest.mark.parametrize(("style_id", "subject"), [("", SUBJECT), ("v1", ""), ("v1", "   ")])
    def test_missing_inputs(self, generator, style_id, subject):
        with pytest.raises(PromptError):
            generator.generate_prompt(style_id, subject)


class TestEnrichPrompt:
    def test_enriched_answer_is_used(self, fake_openai):
        fake_openai.chat_answers.append("  A richer prompt  ")
        assert asyncio.run(enrich_prompt("base", fake_openai)) == ("A richer prompt", True)
        call = fake_openai.chat_calls[0]
        assert call["model"] == fake_openai.config.vision_model
        assert "base" in call["messages"][1]["content"]

    def test_provider_failure_falls_back(self, fake_openai):
        fake_openai.chat_answers.append(ProviderError("rate limited", status_code=429))
        assert asyncio.run(enrich_prompt("base", fake_openai)) == ("base", False)

    def test_empty_answer_falls_back(self, fake_openai):
        fake_openai.chat_answers.append("   ")
        assert asyncio.run(enrich_prompt("base", fake_openai)) == ("base", False)
