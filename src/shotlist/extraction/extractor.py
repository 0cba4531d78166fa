"""Gemini-backed shotlist extractor.

Sends the operator's script to a Gemini text model and turns the reply
into a list of :class:`~shotlist.models.Person`. Output is not
deterministic: the same script may yield a different list on each call.
"""

from __future__ import annotations

import logging

import httpx
from google import genai
from google.genai import errors as genai_errors

from shotlist.exceptions import ExtractionError
from shotlist.extraction.parser import parse_shotlist_response
from shotlist.extraction.prompts import build_shotlist_prompt
from shotlist.models import Person

logger = logging.getLogger(__name__)


class ShotlistExtractor:
    """Extract the people mentioned in a script.

    Usage::

        extractor = ShotlistExtractor(genai.Client(api_key="..."))
        people = await extractor.extract(script_text)
    """

    def __init__(self, client: genai.Client, model: str = "gemini-2.5-flash") -> None:
        self._client = client
        self._model = model

    async def extract(self, script_text: str) -> list[Person]:
        """Run one extraction call.

        Args:
            script_text: Free-text script.

        Returns:
            Non-empty list of people in model order.

        Raises:
            ExtractionError: On API failure or malformed model output.
        """
        prompt = build_shotlist_prompt(script_text)

        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error("Gemini extraction call failed: %s", e)
            raise ExtractionError("Failed to generate shotlist", detail=str(e)) from e

        text = (response.text or "").strip()
        people = parse_shotlist_response(text)
        logger.info("Extracted %d people from script", len(people))
        return people
