"""Unit tests for colour and font candidate extraction."""

from artdirector.core.style_extractor import (
    MAX_COLORS,
    extract_colors,
    extract_fonts,
    extract_style_candidates,
)


class TestExtractColors:
    def test_reads_hex_rgb_and_hsl_from_css(self):
        html = """
        <style>
          body { color: #1A1A1A; background: rgb(255, 255, 255); }
          .accent { border-color: hsl(210, 80%, 50%); }
        </style>
        """
        assert extract_colors(html) == ["#1A1A1A", "rgb(255, 255, 255)", "hsl(210, 80%, 50%)"]

    def test_deduplicates_case_insensitively(self):
        html = "<style>a { color: #ff0000 } b { color: #FF0000 }</style>"
        assert extract_colors(html) == ["#ff0000"]

    def test_fragment_links_are_not_colours(self):
        html = '<a href="#add">Add</a><div style="color: #abc"></div>'
        assert extract_colors(html) == ["#abc"]

    def test_theme_color_meta_is_read(self):
        html = '<meta name="theme-color" content="#0055ff">'
        assert extract_colors(html) == ["#0055ff"]

    def test_result_is_bounded(self):
        rules = " ".join(f".c{i} {{ color: #{i:06x}; }}" for i in range(40))
        assert len(extract_colors(f"<style>{rules}</style>")) == MAX_COLORS


class TestExtractFonts:
    def test_first_family_of_each_declaration(self):
        html = """
        <style>
          body { font-family: "Inter", Helvetica, sans-serif; }
          h1 { font-family: 'Playfair Display', serif; }
          code { font-family: monospace; }
        </style>
        """
        assert extract_fonts(html) == ["Inter", "Playfair Display"]

    def test_css_variables_are_skipped(self):
        html = "<style>body { font-family: var(--font-body); }</style>"
        assert extract_fonts(html) == []

    def test_google_fonts_links(self):
        html = (
            '<link href="https://fonts.googleapis.com/css2?family=Roboto:wght@400;700'
            '&amp;family=Open+Sans&amp;display=swap" rel="stylesheet">'
        )
        assert extract_fonts(html) == ["Roboto", "Open Sans"]

    def test_legacy_pipe_separated_families(self):
        html = "<style>@import url('https://fonts.googleapis.com/css?family=Lato|Oswald:700');</style>"
        assert extract_fonts(html) == ["Lato", "Oswald"]


def test_candidates_bundle_both_lists():
    html = '<style>body { color: #222; font-family: Inter; }</style>'
    candidates = extract_style_candidates(html)
    assert candidates.to_dict() == {"colors": ["#222"], "fonts": ["Inter"]}
