"""ZIP bundle of the selected media files.

Layout: ``{person_name}/{videos|photos}/{media_id}.{mp4|jpg}``, with path
separators in the name replaced. Items mapping to an archive path that is
already taken are fetched once. Each item's ``comp_url`` is fetched with
bounded concurrency; a failed fetch is logged and the item is left out.
The archive is written only after every item has been attempted, and
packaging fails as a whole only when nothing could be fetched.
"""

from __future__ import annotations

import asyncio
import io
import logging
import zipfile
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from shotlist.constants import BUNDLE_FETCH_CONCURRENCY
from shotlist.exceptions import PackagingError, PackagingItemError
from shotlist.models import MediaKind, SelectedItem

logger = logging.getLogger(__name__)

ItemCallback = Callable[[SelectedItem, bool], None]


@dataclass
class BundleResult:
    """Outcome of one packaging run."""

    archive: bytes
    packaged: list[str] = field(default_factory=list)  # archive paths written
    failed: list[PackagingItemError] = field(default_factory=list)


def group_selections(
    selections: list[SelectedItem],
) -> dict[str, dict[MediaKind, list[SelectedItem]]]:
    """Group selections by person name, then by kind, preserving order."""
    grouped: dict[str, dict[MediaKind, list[SelectedItem]]] = {}
    for item in selections:
        grouped.setdefault(item.person_name, {}).setdefault(item.media_type, []).append(item)
    return grouped


class BundlePackager:
    """Fetches selected media and assembles the ZIP archive.

    Usage::

        async with httpx.AsyncClient() as http:
            packager = BundlePackager(http)
            result = await packager.package(ledger.items)
            Path("getty-images.zip").write_bytes(result.archive)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        concurrency: int = BUNDLE_FETCH_CONCURRENCY,
    ) -> None:
        self._http = http
        self._semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _fetch(self, item: SelectedItem) -> bytes:
        if not item.comp_url:
            raise PackagingItemError(item.file_name, detail="no download URL")
        async with self._semaphore:
            try:
                response = await self._http.get(item.comp_url, follow_redirects=True)
                response.raise_for_status()
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise PackagingItemError(item.file_name, detail=str(e)) from e
            return response.content

    async def package(
        self,
        selections: list[SelectedItem],
        on_item: ItemCallback | None = None,
    ) -> BundleResult:
        """Fetch every selection and build the archive.

        Args:
            selections: Ledger contents.
            on_item: Optional ``(item, succeeded)`` callback per attempt.

        Returns:
            BundleResult with the ZIP bytes and per-item outcome.

        Raises:
            PackagingError: If *selections* is empty or no item could be
                fetched.
        """
        if not selections:
            raise PackagingError("No items selected")

        ordered: list[SelectedItem] = []
        paths: set[str] = set()
        for kinds in group_selections(selections).values():
            for items in kinds.values():
                for item in items:
                    # Same-named people searched the same phrase; one copy per path
                    if item.archive_path in paths:
                        logger.info("Skipping duplicate bundle entry %s", item.archive_path)
                        continue
                    paths.add(item.archive_path)
                    ordered.append(item)

        async def attempt(item: SelectedItem) -> bytes | PackagingItemError:
            try:
                content = await self._fetch(item)
            except PackagingItemError as e:
                logger.error("%s", e)
                if on_item is not None:
                    on_item(item, False)
                return e
            if on_item is not None:
                on_item(item, True)
            return content

        outcomes = await asyncio.gather(*(attempt(item) for item in ordered))

        result = BundleResult(archive=b"")
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for item, outcome in zip(ordered, outcomes):
                if isinstance(outcome, PackagingItemError):
                    result.failed.append(outcome)
                    continue
                zf.writestr(item.archive_path, outcome)
                result.packaged.append(item.archive_path)

        if not result.packaged:
            raise PackagingError(
                "Failed to create zip file: no items could be downloaded",
                detail=[str(e) for e in result.failed],
            )

        result.archive = buffer.getvalue()
        logger.info(
            "Packaged %d item(s), %d failed", len(result.packaged), len(result.failed)
        )
        return result
