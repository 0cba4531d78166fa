"""Selection ledger: the operator's curated subset of search results.

Selections are keyed by :class:`~shotlist.models.SelectionKey`
``(person_index, media_id)`` and kept in insertion order, which is the
order exports are written in. Every operation is synchronous and total.
Bulk operations touch exactly one media kind and leave the other kind
untouched. Each mutation notifies listeners so derived outputs (the CSV
export) can be invalidated.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from shotlist.models import (
    GettyMedia,
    MediaKind,
    PersonGettyResults,
    SelectedItem,
    SelectionKey,
)

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


class SelectionLedger:
    """Ordered set of SelectedItem, unique per ``(person_index, media_id)``.

    Usage::

        ledger = SelectionLedger()
        ledger.add_listener(lambda: print("changed"))
        ledger.toggle(0, "Jane Doe", media, MediaKind.VIDEO)
        ledger.is_selected(0, media.id)  # True
    """

    def __init__(self) -> None:
        self._items: list[SelectedItem] = []
        self._listeners: list[ChangeListener] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SelectedItem]:
        return iter(list(self._items))

    def __bool__(self) -> bool:
        return bool(self._items)

    @property
    def items(self) -> list[SelectedItem]:
        """Snapshot of the current selections, in ledger order."""
        return list(self._items)

    def keys(self) -> set[SelectionKey]:
        return {item.key for item in self._items}

    def is_selected(self, person_index: int, media_id: str) -> bool:
        key = SelectionKey(person_index, media_id)
        return any(item.key == key for item in self._items)

    def count(self, kind: MediaKind | None = None, person_index: int | None = None) -> int:
        """Number of selections, optionally filtered by kind and/or person."""
        return sum(
            1
            for item in self._items
            if (kind is None or item.media_type is kind)
            and (person_index is None or item.person_index == person_index)
        )

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback fired after every mutation."""
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in self._listeners:
            listener()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def toggle(
        self,
        person_index: int,
        person_name: str,
        media: GettyMedia,
        kind: MediaKind,
    ) -> bool:
        """Add the item if absent, remove it if present.

        Returns:
            ``True`` if the item is selected after the call.
        """
        key = SelectionKey(person_index, media.id)
        for position, item in enumerate(self._items):
            if item.key == key:
                del self._items[position]
                logger.debug("Deselected %s for person %d", media.id, person_index)
                self._changed()
                return False

        self._items.append(SelectedItem.from_media(person_index, person_name, media, kind))
        logger.debug("Selected %s %s for person %d", kind.value, media.id, person_index)
        self._changed()
        return True

    def select_all_of_kind(
        self,
        person_index: int,
        person_name: str,
        items: Iterable[GettyMedia],
        kind: MediaKind,
    ) -> None:
        """Replace every *kind* selection for *person_index* with *items*."""
        kept = [
            item
            for item in self._items
            if not (item.person_index == person_index and item.media_type is kind)
        ]
        self._items = _dedupe(
            kept + [SelectedItem.from_media(person_index, person_name, m, kind) for m in items]
        )
        self._changed()

    def deselect_all_of_kind(self, person_index: int, kind: MediaKind) -> None:
        """Remove every *kind* selection for *person_index*."""
        self._items = [
            item
            for item in self._items
            if not (item.person_index == person_index and item.media_type is kind)
        ]
        self._changed()

    def select_all_global(self, kind: MediaKind, results: list[PersonGettyResults]) -> None:
        """Replace every *kind* selection with all *kind* results of every person."""
        kept = [item for item in self._items if item.media_type is not kind]
        added = [
            SelectedItem.from_media(index, result.person.name, media, kind)
            for index, result in enumerate(results)
            for media in result.items_of(kind)
        ]
        self._items = _dedupe(kept + added)
        self._changed()

    def deselect_all_global(self, kind: MediaKind) -> None:
        """Remove every *kind* selection regardless of person."""
        self._items = [item for item in self._items if item.media_type is not kind]
        self._changed()

    def clear(self) -> None:
        self._items = []
        self._changed()


def _dedupe(items: list[SelectedItem]) -> list[SelectedItem]:
    """Keep the last occurrence of each key, preserving order of the survivors.

    A provider id can in principle appear in both kinds for the same
    person; the most recent selection wins so the key stays unique.
    """
    last_index = {item.key: position for position, item in enumerate(items)}
    return [item for position, item in enumerate(items) if last_index[item.key] == position]
