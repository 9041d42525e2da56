"""Generation history storage helpers.

The history is a single JSON list, newest entry first, capped at
``config.history_limit`` entries; adding past the cap drops the oldest.
Route handlers go through :class:`HistoryStore` so the file format stays in
one place.

A missing or unreadable file is treated as an empty history.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from artdirector.core.models import HistoryEntry

logger = logging.getLogger(__name__)


def load_history_entries(history_file: Path) -> list[HistoryEntry]:
    """Load the history, skipping malformed entries."""
    if not history_file.exists():
        return []
    try:
        with open(history_file, encoding="utf-8") as handle:
            raw_entries = json.load(handle)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"History file {history_file} is unreadable, starting empty: {e}")
        return []

    if not isinstance(raw_entries, list):
        return []

    entries: list[HistoryEntry] = []
    for raw in raw_entries:
        if not isinstance(raw, dict) or not raw.get("image_url"):
            continue
        try:
            entries.append(HistoryEntry.from_dict(raw))
        except TypeError:
            continue
    return entries


def save_history_entries(history_file: Path, entries: list[HistoryEntry]) -> None:
    history_file.parent.mkdir(parents=True, exist_ok=True)
    with open(history_file, "w", encoding="utf-8") as handle:
        json.dump([entry.to_dict() for entry in entries], handle, indent=2)


def paginate_history(entries: list[HistoryEntry], page: int, per_page: int) -> dict:
    """Paginate entries, clamping *page* to the valid range."""
    total = len(entries)
    pages = (total + per_page - 1) // per_page if total > 0 else 1
    resolved_page = min(max(page, 1), pages)

    start = (resolved_page - 1) * per_page
    return {
        "total": total,
        "page": resolved_page,
        "perPage": per_page,
        "pages": pages,
        "entries": [entry.to_api() for entry in entries[start : start + per_page]],
    }


class HistoryStore:
    """File-backed, capped, newest-first history."""

    def __init__(self, history_file: Path, limit: int = 100) -> None:
        self.history_file = history_file
        self.limit = limit

    def entries(self) -> list[HistoryEntry]:
        return load_history_entries(self.history_file)

    def add(self, entry: HistoryEntry) -> HistoryEntry:
        entries = [entry, *self.entries()][: self.limit]
        save_history_entries(self.history_file, entries)
        logger.debug(f"History entry {entry.id} added ({len(entries)} total)")
        return entry

    def delete(self, entry_id: str) -> bool:
        """Remove one entry; returns whether it existed."""
        entries = self.entries()
        kept = [entry for entry in entries if entry.id != entry_id]
        if len(kept) == len(entries):
            return False
        save_history_entries(self.history_file, kept)
        return True

    def clear(self) -> int:
        """Remove every entry; returns how many were removed."""
        count = len(self.entries())
        save_history_entries(self.history_file, [])
        logger.info(f"History cleared ({count} entries)")
        return count
