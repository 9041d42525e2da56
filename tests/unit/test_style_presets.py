"""Unit tests for the preset style table."""

import json

import pytest

from artdirector.core.errors import StyleNotFoundError
from artdirector.core.style_presets import StylePresets, is_custom_style


@pytest.mark.parametrize(
    ("style_id", "custom"),
    [("scanned-example.com", True), ("uploaded-1", True), ("library-2", True), ("v1", False)],
)
def test_custom_style_prefixes(style_id, custom):
    assert is_custom_style(style_id) is custom


class TestStylePresets:
    def test_shipped_presets(self, presets):
        assert presets.ids() == ["v1", "v2", "v3"]

    def test_global_style_flattens_brand_identity(self, presets):
        style = presets.global_style("v1")
        assert style.color_palette[0] == "#2563EB"
        assert style.visual_language == "modern SaaS illustration, precise and friendly"

    def test_unknown_style(self, presets):
        with pytest.raises(StyleNotFoundError):
            presets.global_style("v42")

    def test_template_lookup(self, presets):
        template = presets.template("v1", "hero")
        assert template.section == "Hero"
        assert len(template.key_elements) == 4

    def test_unknown_template(self, presets):
        with pytest.raises(StyleNotFoundError, match="missing"):
            presets.template("v1", "missing")

    def test_style_name_for_analysis(self, presets):
        assert presets.style_name("v2") == "Glassmorphism - Minimal, elegant, glass effects"
        assert presets.style_name("scanned-x") == "Modern and professional"

    def test_list_styles_summaries(self, presets):
        listing = presets.list_styles()
        assert [style["id"] for style in listing] == ["v1", "v2", "v3"]
        assert listing[0]["templates"][0] == {
            "id": "hero",
            "section": "Hero",
            "context": "Landing page hero illustrating the main product promise",
        }


class TestLoading:
    def test_missing_file(self, temp_dir):
        assert StylePresets.from_file(temp_dir / "nope.json").ids() == []

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "styles.json"
        path.write_text("{not json", encoding="utf-8")
        assert StylePresets.from_file(path).ids() == []

    def test_non_object(self, temp_dir):
        path = temp_dir / "styles.json"
        path.write_text(json.dumps(["v1"]), encoding="utf-8")
        assert StylePresets.from_file(path).ids() == []
