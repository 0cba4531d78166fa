"""Getty editorial search gateway.

Stateless forwarder in front of the Getty v3 search API: attaches the
``Api-Key`` header and the caller's bearer token, fills in default
``fields`` and ``sort_order`` when the caller omits them, and forwards
provider errors with their original status and JSON body.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from shotlist.constants import (
    DEFAULT_GATEWAY_FIELDS,
    DEFAULT_GATEWAY_SORT_ORDER,
    GETTY_API_BASE_URL,
    PHOTO_SEARCH_ROUTE,
    VIDEO_SEARCH_ROUTE,
)
from shotlist.exceptions import AuthError, SearchError
from shotlist.models import MediaKind

logger = logging.getLogger(__name__)

_ROUTES: dict[MediaKind, str] = {
    MediaKind.VIDEO: VIDEO_SEARCH_ROUTE,
    MediaKind.PHOTO: PHOTO_SEARCH_ROUTE,
}

# Key holding the record list in each search response
RESPONSE_KEYS: dict[MediaKind, str] = {
    MediaKind.VIDEO: "videos",
    MediaKind.PHOTO: "images",
}


def build_search_params(params: dict[str, Any]) -> dict[str, Any]:
    """Apply gateway defaults without overriding caller-supplied values."""
    merged = {k: v for k, v in params.items() if v is not None}
    merged.setdefault("fields", DEFAULT_GATEWAY_FIELDS)
    merged.setdefault("sort_order", DEFAULT_GATEWAY_SORT_ORDER)
    return merged


class GettyGateway:
    """Forwards editorial search requests to Getty.

    Usage::

        async with httpx.AsyncClient() as http:
            gateway = GettyGateway(http, api_key="...")
            data = await gateway.search(
                MediaKind.VIDEO, {"phrase": "Jane Doe"}, authorization="Bearer abc"
            )
            records = data["videos"]
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        base_url: str = GETTY_API_BASE_URL,
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    def url_for(self, kind: MediaKind) -> str:
        return f"{self._base_url}{_ROUTES[kind]}"

    async def search(
        self,
        kind: MediaKind,
        params: dict[str, Any],
        authorization: str | None,
    ) -> dict[str, Any]:
        """Issue one editorial search.

        Args:
            kind: Video or photo search.
            params: Query parameters (``phrase``, ``page``, ...). ``None``
                values are dropped.
            authorization: Full ``Authorization`` header value.

        Returns:
            The provider's JSON body.

        Raises:
            AuthError: If *authorization* is missing or not a bearer token.
            SearchError: On transport failure, a non-2xx provider status, or a
                body that is not a JSON object.
        """
        if not authorization or not authorization.startswith("Bearer "):
            raise AuthError("Invalid or missing authorization token")

        query = build_search_params(params)
        logger.info("Making Getty %s request with query: %s", kind.value, query)

        try:
            response = await self._http.get(
                self.url_for(kind),
                params=query,
                headers={
                    "Api-Key": self._api_key,
                    "Authorization": authorization,
                },
            )
        except httpx.HTTPError as e:
            logger.error("Getty %s request failed: %s", kind.value, e)
            raise SearchError(f"Failed to fetch Getty {kind.plural}", payload=str(e)) from e

        if not response.is_success:
            payload = _error_payload(response)
            logger.error("Getty API Error (%d): %s", response.status_code, payload)
            raise SearchError(
                f"Getty {kind.value} search failed",
                status=response.status_code,
                payload=payload,
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Getty %s response is not JSON: %.200s", kind.value, response.text)
            raise SearchError(
                f"Getty {kind.value} search returned an unreadable response",
                status=response.status_code,
                payload=response.text,
            ) from e
        if not isinstance(data, dict):
            raise SearchError(
                f"Getty {kind.value} search returned an unreadable response",
                status=response.status_code,
                payload=data,
            )

        records = data.get(RESPONSE_KEYS[kind]) or []
        logger.info(
            "Getty API %s response: %d found for phrase: %s",
            kind.value,
            len(records),
            query.get("phrase"),
        )
        if records:
            logger.debug("Sample %s result: %s", kind.value, records[0].get("title"))
        return data


def _error_payload(response: httpx.Response) -> Any:
    """Provider error body: JSON when possible, raw text otherwise."""
    try:
        return response.json()
    except ValueError:
        return response.text
