"""Parser for the model's shotlist response.

The model is asked for a bare JSON array but sometimes wraps it in a
fenced code block (```json ... ```). Fences are stripped before parsing;
anything else that is not a non-empty array of person objects is an
``ExtractionError``.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from shotlist.exceptions import ExtractionError
from shotlist.extraction.schemas import ShotlistOutput
from shotlist.models import Person

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a leading and/or trailing Markdown code fence from *text*."""
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def parse_shotlist_response(text: str) -> list[Person]:
    """Parse raw model text into a list of people.

    Args:
        text: Raw response text, optionally fenced.

    Returns:
        People in the order the model listed them. A missing
        ``searchTerm`` falls back to the name.

    Raises:
        ExtractionError: If the text is not valid JSON, not an array, an
            empty array, or contains entries without a name.
    """
    cleaned = strip_code_fences(text or "")

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("Shotlist response is not valid JSON: %s", cleaned[:200])
        raise ExtractionError("Model response is not valid JSON", detail=str(e)) from e

    if not isinstance(parsed, list):
        raise ExtractionError(
            "Model response is not a JSON array",
            detail=type(parsed).__name__,
        )

    if not parsed:
        raise ExtractionError("No people found in script")

    try:
        entries = ShotlistOutput.model_validate(parsed).root
    except ValidationError as e:
        raise ExtractionError("Model returned malformed person entries", detail=str(e)) from e

    return [
        Person(name=entry.name, search_term=(entry.search_term or entry.name).strip())
        for entry in entries
    ]
