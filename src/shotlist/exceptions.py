"""Exception hierarchy for the shotlist pipeline.

Every externally caused failure (network, provider, model) is converted
into one of these at the operation boundary so callers see a single
human-readable message plus the original detail.
"""

from __future__ import annotations

from typing import Any


class ShotlistError(Exception):
    """Base class for all pipeline errors.

    Attributes:
        message: Human-readable summary suitable for the operator.
        detail: Original detail (provider payload, parser message, ...).
    """

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail is None:
            return self.message
        return f"{self.message}: {self.detail}"


class AuthError(ShotlistError):
    """Missing or invalid Getty bearer token, or a failed token exchange."""


class ExtractionError(ShotlistError):
    """The generative model returned content that is not a non-empty JSON array."""


class SearchError(ShotlistError):
    """A Getty search returned a non-success status or could not be issued.

    Attributes:
        status: Provider HTTP status, or ``None`` when no request was sent.
        payload: Provider JSON body forwarded verbatim, if any.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message, detail=payload)
        self.status = status
        self.payload = payload

    def __str__(self) -> str:
        base = self.message if self.status is None else f"{self.message} (HTTP {self.status})"
        if self.payload is None:
            return base
        return f"{base}: {self.payload}"


class ExportError(ShotlistError):
    """Export requested with nothing selected."""


class PackagingItemError(ShotlistError):
    """A single bundle item could not be fetched. Logged, never fatal."""

    def __init__(self, file_name: str, detail: Any = None) -> None:
        super().__init__(f"Failed to download {file_name}", detail=detail)
        self.file_name = file_name


class PackagingError(ShotlistError):
    """The bundle ended up with zero items."""
