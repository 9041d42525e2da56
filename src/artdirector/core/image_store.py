"""Persist generated images with a JSON metadata sidecar.

Images are stored in one folder per (UTC) day::

    <outputs>/2026-10-19/1760870400000-v1-a-team-planning-a-launch.png
    <outputs>/2026-10-19/1760870400000-metadata.json

The millisecond timestamp prefix links an image to its sidecar.  Whatever
format the provider served, the file is written as PNG.
"""

from __future__ import annotations

import io
import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError

from artdirector.core.errors import ProviderError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/generated-images"
MAX_SLUG_SOURCE_LENGTH = 50
PNG_MODES = frozenset({"1", "L", "LA", "P", "RGB", "RGBA", "I"})

_SLUG_INVALID_RE = re.compile(r"[^a-z0-9-_]", re.IGNORECASE)
_SLUG_DASHES_RE = re.compile(r"-+")


def slugify_subject(subject: str) -> str:
    """Filename-safe form of the first 50 characters of *subject*."""
    slug = _SLUG_INVALID_RE.sub("-", subject[:MAX_SLUG_SOURCE_LENGTH])
    return _SLUG_DASHES_RE.sub("-", slug).lower()


@dataclass
class SavedImage:
    path: str
    filename: str
    metadata_path: Path
    file_path: Path

    def to_api(self) -> dict:
        return {"path": self.path, "filename": self.filename}


class ImageStore:
    """Writes images and sidecars under *outputs_dir*."""

    def __init__(self, outputs_dir: Path) -> None:
        self.outputs_dir = outputs_dir

    def save(
        self,
        image_bytes: bytes,
        original_url: str,
        metadata: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> SavedImage:
        """Write *image_bytes* as PNG plus its metadata sidecar.

        Args:
            image_bytes: Downloaded image content, any format Pillow reads.
            original_url: Where the image was downloaded from.
            metadata: Free-form generation metadata; ``style`` and
                ``subject`` feed the filename.
            now: Timestamp override.

        Returns:
            The public path (``/generated-images/<date>/<file>``) and the
            written files.

        Raises:
            ProviderError: The content is not a readable image.
        """
        metadata = dict(metadata or {})
        now = now or datetime.now(timezone.utc)
        date_folder = now.strftime("%Y-%m-%d")
        timestamp = int(now.timestamp() * 1000)

        style = str(metadata.get("style") or "unknown")
        subject = str(metadata.get("subject") or "image")
        filename = f"{timestamp}-{slugify_subject(style)}-{slugify_subject(subject)}.png"

        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ProviderError(
                f"Downloaded content is not an image: {e}", status_code=502, provider="Web"
            ) from e
        if image.mode not in PNG_MODES:
            image = image.convert("RGBA")

        output_dir = self.outputs_dir / date_folder
        output_dir.mkdir(parents=True, exist_ok=True)

        file_path = output_dir / filename
        image.save(file_path, format="PNG")
        logger.info(f"Saved image to: {file_path}")

        metadata_path = output_dir / f"{timestamp}-metadata.json"
        sidecar = {
            "filename": filename,
            **metadata,
            "savedAt": now.isoformat(),
            "originalUrl": original_url,
        }
        with open(metadata_path, "w", encoding="utf-8") as f:
            json.dump(sidecar, f, indent=2, ensure_ascii=False)
        logger.info(f"Saved metadata to: {metadata_path}")

        return SavedImage(
            path=f"{PUBLIC_PREFIX}/{date_folder}/{filename}",
            filename=filename,
            metadata_path=metadata_path,
            file_path=file_path,
        )
