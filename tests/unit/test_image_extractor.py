"""Unit tests for regex-based image extraction."""

import pytest

from artdirector.core.image_extractor import (
    extract_images,
    is_valid_image_url,
    normalize_image_url,
    resolve_url,
    split_srcset,
)

BASE = "https://example.com/blog/post.html"


class TestResolveUrl:
    """Test resolution of image references against the page URL."""

    def test_absolute_passes_through(self):
        assert resolve_url("https://cdn.test/a.jpg", BASE) == "https://cdn.test/a.jpg"

    def test_protocol_relative_adopts_scheme(self):
        assert resolve_url("//cdn.test/a.jpg", BASE) == "https://cdn.test/a.jpg"

    def test_root_relative_adopts_origin(self):
        assert resolve_url("/img/a.jpg", BASE) == "https://example.com/img/a.jpg"

    def test_path_relative_resolves_against_page(self):
        assert resolve_url("images/a.jpg", BASE) == "https://example.com/blog/images/a.jpg"


class TestIsValidImageUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/favicon.png",
            "https://example.com/sprite-sheet.png",
            "https://example.com/tracking/1x1.gif",
            "https://example.com/page",
            "ftp://example.com/a.jpg",
            "",
        ],
    )
    def test_rejects_noise_and_non_images(self, url):
        assert is_valid_image_url(url) is False

    def test_accepts_content_image(self):
        assert is_valid_image_url("https://example.com/photos/team.webp?w=400") is True


def test_normalize_strips_resize_params_only():
    assert normalize_image_url("https://Example.com/a.jpg?w=300&id=7") == (
        "https://example.com/a.jpg?id=7"
    )


def test_split_srcset_drops_descriptors():
    assert split_srcset("a.jpg 1x, b.jpg 2x,c.jpg 640w") == ["a.jpg", "b.jpg", "c.jpg"]


class TestExtractImages:
    """Test the full extraction pipeline."""

    def test_every_url_is_absolute(self):
        html = """
        <img src="/img/hero.jpg" alt="Hero">
        <img src="thumbs/one.png">
        <img src="//cdn.example.com/two.webp">
        <div style="background-image: url('/bg/wave.jpg')"></div>
        """
        images = extract_images(html, BASE)
        assert len(images) == 4
        assert all(image.url.startswith(("http://", "https://")) for image in images)

    def test_resize_variants_collapse_to_one(self):
        html = """
        <img src="https://cdn.test/photo.jpg?w=300">
        <img src="https://cdn.test/photo.jpg?w=1200&q=80">
        """
        images = extract_images(html, BASE)
        assert [image.url for image in images] == ["https://cdn.test/photo.jpg?w=300"]

    def test_srcset_candidates_are_collected(self):
        html = '<img src="/a.jpg" srcset="/b.jpg 1x, /c.jpg 2x" alt="Set">'
        urls = [image.url for image in extract_images(html, BASE)]
        assert urls == [
            "https://example.com/a.jpg",
            "https://example.com/b.jpg",
            "https://example.com/c.jpg",
        ]

    def test_alt_and_dimensions_are_read(self):
        html = '<img src="/a.jpg" alt="A &amp; B" width="640" height="480px">'
        image = extract_images(html, BASE)[0]
        assert image.alt == "A & B"
        assert (image.width, image.height) == (640, 480)

    def test_data_src_is_not_mistaken_for_src(self):
        html = '<img data-src="/lazy.jpg" src="/real.jpg">'
        assert [image.url for image in extract_images(html, BASE)] == ["https://example.com/real.jpg"]

    def test_small_images_dropped_only_when_both_dimensions_small(self):
        html = """
        <img src="/tiny.png" width="16" height="16">
        <img src="/banner.png" width="800" height="20">
        <img src="/unknown.png">
        """
        urls = [image.url for image in extract_images(html, BASE, min_size=50)]
        assert urls == ["https://example.com/banner.png", "https://example.com/unknown.png"]

    def test_small_variant_first_does_not_hide_large_variant(self):
        html = '<img src="/a.jpg?w=20" width="20" height="20"><img src="/a.jpg?w=800" width="800" height="600">'
        images = extract_images(html, "https://example.com/", min_size=50)
        assert [image.url for image in images] == ["https://example.com/a.jpg?w=800"]
        assert (images[0].width, images[0].height) == (800, 600)

    def test_background_images_labelled(self):
        html = '<section style="background-image:url(/bg.png)"></section>'
        image = extract_images(html, BASE)[0]
        assert image.alt == "Background image"
        assert image.width is None

    def test_data_uris_ignored(self):
        html = '<img src="data:image/png;base64,AAAA">'
        assert extract_images(html, BASE) == []
