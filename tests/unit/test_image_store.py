"""Unit tests for saving generated images with metadata sidecars."""

import io
import json
from datetime import datetime, timezone

import pytest
from PIL import Image

from artdirector.core.errors import ProviderError
from artdirector.core.image_store import ImageStore, slugify_subject

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
TIMESTAMP = int(NOW.timestamp() * 1000)


class TestSlugifySubject:
    def test_replaces_unsafe_characters(self):
        assert slugify_subject("A team, planning: launch!") == "a-team-planning-launch-"

    def test_truncates_source(self):
        assert len(slugify_subject("x" * 80)) == 50


class TestImageStore:
    def test_saves_png_and_sidecar(self, temp_dir, png_bytes):
        saved = ImageStore(temp_dir).save(
            png_bytes,
            "https://images.test/a.png",
            {"style": "v1", "subject": "Team meeting", "prompt": "p"},
            now=NOW,
        )

        assert saved.filename == f"{TIMESTAMP}-v1-team-meeting.png"
        assert saved.path == f"/generated-images/2026-10-19/{saved.filename}"
        assert saved.file_path.exists()
        assert saved.to_api() == {"path": saved.path, "filename": saved.filename}

        sidecar = json.loads(saved.metadata_path.read_text(encoding="utf-8"))
        assert saved.metadata_path.name == f"{TIMESTAMP}-metadata.json"
        assert sidecar["filename"] == saved.filename
        assert sidecar["prompt"] == "p"
        assert sidecar["originalUrl"] == "https://images.test/a.png"
        assert sidecar["savedAt"].startswith("2026-10-19T12:00")

    def test_other_formats_written_as_png(self, temp_dir):
        buffer = io.BytesIO()
        Image.new("RGB", (4, 4), (0, 0, 255)).save(buffer, format="JPEG")
        saved = ImageStore(temp_dir).save(buffer.getvalue(), "https://images.test/a.jpg", now=NOW)
        with Image.open(saved.file_path) as image:
            assert image.format == "PNG"

    def test_default_name_parts(self, temp_dir, png_bytes):
        saved = ImageStore(temp_dir).save(png_bytes, "https://images.test/a.png", now=NOW)
        assert saved.filename == f"{TIMESTAMP}-unknown-image.png"

    def test_rejects_non_images(self, temp_dir):
        with pytest.raises(ProviderError) as exc_info:
            ImageStore(temp_dir).save(b"<html></html>", "https://images.test/a.png", now=NOW)
        assert exc_info.value.status_code == 502
