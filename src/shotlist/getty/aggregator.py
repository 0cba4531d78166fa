"""Sequential, rate-limited Getty search across a shotlist.

For each person, in order:

1. Build the phrase from the bare name (plus the PMCARC marker when
   phrase augmentation is on). The model's contextual ``search_term`` is
   never sent.
2. Issue one video and one photo search, each fetching up to
   ``FETCH_PAGE_SIZE`` candidates sorted by popularity, restricted to the
   active collection codes when any are set.
3. Keep the first ``RESULTS_PER_KIND`` records of each, in provider order.
4. Pause ``FixedDelayRateLimiter.delay`` seconds before the next person.

People are never searched concurrently. The first failure aborts the
rest of the queue and no partial results are returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from shotlist.constants import (
    FETCH_PAGE_SIZE,
    RESULTS_PER_KIND,
    SEARCH_FIELDS,
    SEARCH_SORT_ORDER,
)
from shotlist.exceptions import AuthError, SearchError
from shotlist.getty.gateway import RESPONSE_KEYS, GettyGateway
from shotlist.getty.normalize import normalize_records
from shotlist.getty.rate_limiter import FixedDelayRateLimiter
from shotlist.models import FilterConfig, GettyMedia, MediaKind, Person, PersonGettyResults

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, Person], None]


def build_query(phrase: str, filter_config: FilterConfig) -> dict[str, Any]:
    """Query parameters for one search; ``collection_codes`` only when set."""
    params: dict[str, Any] = {
        "phrase": phrase,
        "page": 1,
        "page_size": FETCH_PAGE_SIZE,
        "fields": SEARCH_FIELDS,
        "sort_order": SEARCH_SORT_ORDER,
    }
    codes = filter_config.collection_codes
    if codes:
        params["collection_codes"] = codes
    return params


class SearchAggregator:
    """Runs the per-person video+photo search queue.

    Usage::

        aggregator = SearchAggregator(gateway, FixedDelayRateLimiter(1.0))
        results = await aggregator.search_all(people, FilterConfig(), token)
    """

    def __init__(
        self,
        gateway: GettyGateway,
        rate_limiter: FixedDelayRateLimiter,
        results_per_kind: int = RESULTS_PER_KIND,
    ) -> None:
        self._gateway = gateway
        self._rate_limiter = rate_limiter
        self._results_per_kind = results_per_kind

    async def search_kind(
        self,
        kind: MediaKind,
        phrase: str,
        filter_config: FilterConfig,
        authorization: str,
    ) -> list[GettyMedia]:
        """Search one kind and normalise the top results."""
        data = await self._gateway.search(
            kind, build_query(phrase, filter_config), authorization=authorization
        )
        records = data.get(RESPONSE_KEYS[kind]) or []
        if not records:
            logger.warning("No %s found for search term: %r", kind.plural, phrase)
        return normalize_records(records, limit=self._results_per_kind)

    async def search_person(
        self,
        person: Person,
        filter_config: FilterConfig,
        authorization: str,
    ) -> PersonGettyResults:
        """Video then photo search for one person."""
        phrase = filter_config.build_phrase(person.name)
        videos = await self.search_kind(MediaKind.VIDEO, phrase, filter_config, authorization)
        photos = await self.search_kind(MediaKind.PHOTO, phrase, filter_config, authorization)
        logger.info(
            "Searched %r: %d videos, %d photos", person.name, len(videos), len(photos)
        )
        return PersonGettyResults(person=person, videos=videos, photos=photos)

    async def search_all(
        self,
        people: list[Person],
        filter_config: FilterConfig,
        access_token: str | None,
        on_progress: ProgressCallback | None = None,
    ) -> list[PersonGettyResults]:
        """Search every person in order.

        Args:
            people: Shotlist, in display order.
            filter_config: Collection and phrase filters.
            access_token: Bearer token from the token exchange.
            on_progress: Optional ``(done, total, person)`` callback fired
                after each person completes.

        Returns:
            One PersonGettyResults per person, same order, empty arrays
            allowed.

        Raises:
            SearchError: If no token is available or any provider call
                fails; the remaining queue is abandoned.
        """
        if not access_token:
            raise SearchError("Getty API not initialized: no access token available")

        authorization = f"Bearer {access_token}"
        results: list[PersonGettyResults] = []
        total = len(people)

        for index, person in enumerate(people):
            try:
                result = await self.search_person(person, filter_config, authorization)
            except AuthError as e:
                raise SearchError(e.message, status=401, payload=e.detail) from e
            except SearchError:
                logger.error(
                    "Search aborted at person %d/%d (%r)", index + 1, total, person.name
                )
                raise

            results.append(result)
            if on_progress is not None:
                on_progress(index + 1, total, person)

            await self._rate_limiter.wait()

        return results
