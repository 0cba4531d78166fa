"""Normalise Getty search records into :class:`GettyMedia`.

A record carries a variable-size ``display_sizes`` list of named
renditions. Display URLs come from ``thumb`` and ``preview``; the
full-resolution reference prefers ``comp`` and falls back to
``preview``. A missing rendition yields ``""`` for that field.
"""

from __future__ import annotations

from typing import Any

from shotlist.constants import (
    COMP_RENDITION_FALLBACK,
    PREVIEW_RENDITION,
    RESULTS_PER_KIND,
    THUMBNAIL_RENDITION,
)
from shotlist.models import GettyMedia


def pick_rendition(display_sizes: list[dict[str, Any]] | None, *names: str) -> str:
    """Return the URI of the first rendition matching *names*, in order.

    Args:
        display_sizes: The record's ``display_sizes`` list (may be ``None``).
        names: Rendition names in order of preference.

    Returns:
        The matching ``uri``, or ``""`` if none match.
    """
    sizes = display_sizes or []
    for name in names:
        for size in sizes:
            if size.get("name") == name and size.get("uri"):
                return size["uri"]
    return ""


def normalize_record(record: dict[str, Any]) -> GettyMedia:
    """Convert one provider record into a GettyMedia."""
    sizes = record.get("display_sizes")
    return GettyMedia(
        id=str(record.get("id", "")),
        title=record.get("title") or "",
        thumbnail_url=pick_rendition(sizes, THUMBNAIL_RENDITION),
        preview_url=pick_rendition(sizes, PREVIEW_RENDITION),
        comp_url=pick_rendition(sizes, *COMP_RENDITION_FALLBACK),
        date_created=record.get("date_created") or "",
    )


def normalize_records(
    records: list[dict[str, Any]] | None,
    limit: int = RESULTS_PER_KIND,
) -> list[GettyMedia]:
    """Normalise the first *limit* records, preserving provider order."""
    return [normalize_record(record) for record in (records or [])[:limit]]
