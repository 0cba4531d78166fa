"""One-shot Getty client-credential token exchange.

The token is held in memory for the session; it is never refreshed or
persisted.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ValidationError

from shotlist.constants import GETTY_TOKEN_URL
from shotlist.exceptions import AuthError

logger = logging.getLogger(__name__)


class AccessToken(BaseModel):
    """Token endpoint response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None

    @property
    def authorization(self) -> str:
        """Value for the ``Authorization`` header."""
        return f"Bearer {self.access_token}"


async def fetch_access_token(
    http: httpx.AsyncClient,
    api_key: str,
    api_secret: str,
    token_url: str = GETTY_TOKEN_URL,
) -> AccessToken:
    """Exchange client credentials for a bearer token.

    Args:
        http: Shared async HTTP client.
        api_key: Getty API key (client id).
        api_secret: Getty API secret (client secret).
        token_url: Token endpoint URL.

    Returns:
        The parsed AccessToken.

    Raises:
        AuthError: On transport failure, non-2xx status, or a response
            without ``access_token``.
    """
    form = {
        "grant_type": "client_credentials",
        "client_id": api_key,
        "client_secret": api_secret,
    }

    try:
        response = await http.post(
            token_url,
            data=form,
            headers={"Api-Key": api_key},
        )
    except httpx.HTTPError as e:
        raise AuthError("Failed to reach Getty token endpoint", detail=str(e)) from e

    if not response.is_success:
        raise AuthError(
            f"Failed to get access token: {response.status_code}",
            detail=response.text,
        )

    try:
        token = AccessToken.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise AuthError("No access token in response", detail=str(e)) from e

    logger.info("Obtained Getty access token (expires in %ss)", token.expires_in)
    return token
