"""Compile the current selection into spreadsheet-ready CSV text.

Columns: ``Person Name, Getty File ID, Media Type, Title, Date Created,
Download URL``. The title is always double-quoted with internal quotes
doubled; other fields are quoted only when they contain a delimiter,
quote, or newline. Selections whose media can no longer be resolved in
the result sets are skipped.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime

from shotlist.constants import CSV_HEADER
from shotlist.exceptions import ExportError
from shotlist.models import PersonGettyResults, SelectedItem

logger = logging.getLogger(__name__)

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def quote_always(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def quote_minimal(value: str) -> str:
    if any(ch in value for ch in _NEEDS_QUOTING):
        return quote_always(value)
    return value


def format_date(value: str) -> str:
    """Render an ISO timestamp as a US locale date (``M/D/YYYY``).

    Timezone-aware values are converted to local time first. Values that
    do not parse are returned unchanged.
    """
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable date_created %r, exporting verbatim", value)
        return value
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def compile_csv(
    selections: list[SelectedItem],
    results: list[PersonGettyResults],
) -> str:
    """Build the CSV export text.

    Args:
        selections: Ledger contents, in ledger order.
        results: Search results the selections were drawn from.

    Returns:
        Header line plus one line per resolvable selection, each ending
        in ``\\n``.

    Raises:
        ExportError: If *selections* is empty.
    """
    if not selections:
        raise ExportError("No items selected. Please select videos or photos to export.")

    lines = [",".join(CSV_HEADER)]
    skipped = 0

    for item in selections:
        if not 0 <= item.person_index < len(results):
            skipped += 1
            continue
        media = results[item.person_index].find(item.media_type, item.media_id)
        if media is None:
            skipped += 1
            continue

        lines.append(
            ",".join(
                [
                    quote_minimal(item.person_name),
                    quote_minimal(media.id),
                    item.media_type.value,
                    quote_always(media.title),
                    quote_minimal(format_date(media.date_created)),
                    quote_minimal(media.comp_url),
                ]
            )
        )

    if skipped:
        logger.warning("Skipped %d selection(s) with no matching search result", skipped)
    logger.info("Compiled CSV export with %d row(s)", len(lines) - 1)
    return "\n".join(lines) + "\n"


def count_rows(text: str) -> int:
    """Number of data records in compiled CSV *text* (header excluded).

    Quoted fields may span lines, so records are counted by parsing
    rather than by newlines.
    """
    return max(0, sum(1 for _ in csv.reader(io.StringIO(text))) - 1)
