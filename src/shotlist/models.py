"""Data models and enums for the shotlist pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from shotlist.constants import COLLECTION_CODES, PMCARC_MARKER


class MediaKind(str, Enum):
    """Kind of Getty media a search or selection refers to."""

    VIDEO = "video"
    PHOTO = "photo"

    @property
    def extension(self) -> str:
        """File extension used for downloaded files of this kind."""
        return "mp4" if self is MediaKind.VIDEO else "jpg"

    @property
    def plural(self) -> str:
        """Folder name inside the bundle (``videos`` / ``photos``)."""
        return f"{self.value}s"


@dataclass(frozen=True, slots=True)
class Person:
    """A person mentioned in the script, as returned by the extractor.

    ``search_term`` is shown to the operator but never sent to Getty;
    searches use the bare ``name``.
    """

    name: str
    search_term: str


@dataclass(frozen=True, slots=True)
class GettyMedia:
    """A single normalised Getty search result (video or photo)."""

    id: str
    title: str
    thumbnail_url: str
    preview_url: str
    comp_url: str  # full-resolution reference used for download/export
    date_created: str


@dataclass(slots=True)
class PersonGettyResults:
    """Search results for one person, in shotlist order."""

    person: Person
    videos: list[GettyMedia] = field(default_factory=list)
    photos: list[GettyMedia] = field(default_factory=list)

    def items_of(self, kind: MediaKind) -> list[GettyMedia]:
        """Return the result list for *kind*."""
        return self.videos if kind is MediaKind.VIDEO else self.photos

    def find(self, kind: MediaKind, media_id: str) -> GettyMedia | None:
        """Look up a media item by ``(kind, id)``; ``None`` if absent."""
        for media in self.items_of(kind):
            if media.id == media_id:
                return media
        return None


@dataclass(frozen=True, slots=True)
class SelectionKey:
    """Composite identity of a selection: ``(person_index, media_id)``.

    The same Getty id may appear under two different people, so the id
    alone is not unique.
    """

    person_index: int
    media_id: str


@dataclass(frozen=True, slots=True)
class SelectedItem:
    """An operator-chosen media item destined for export and download."""

    person_index: int
    person_name: str
    media_id: str
    media_type: MediaKind
    comp_url: str
    file_name: str

    @property
    def key(self) -> SelectionKey:
        return SelectionKey(self.person_index, self.media_id)

    @classmethod
    def from_media(
        cls,
        person_index: int,
        person_name: str,
        media: GettyMedia,
        kind: MediaKind,
    ) -> SelectedItem:
        """Build a selection for *media*, deriving ``<id>.mp4`` / ``<id>.jpg``."""
        return cls(
            person_index=person_index,
            person_name=person_name,
            media_id=media.id,
            media_type=kind,
            comp_url=media.comp_url,
            file_name=f"{media.id}.{kind.extension}",
        )

    @property
    def archive_path(self) -> str:
        """Path of this item inside the bundle."""
        return f"{folder_name(self.person_name)}/{self.media_type.plural}/{self.file_name}"


def folder_name(person_name: str) -> str:
    """Single path component for *person_name*: no separators, never ``.``/``..``."""
    name = person_name.replace("/", "_").replace("\\", "_").strip()
    if name in ("", ".", ".."):
        return "_"
    return name


@dataclass
class FilterConfig:
    """Collection and phrase filters applied to every Getty search.

    Each collection toggle maps to a Getty collection code (see
    ``COLLECTION_CODES``). With no toggle on, searches are unrestricted.
    Defaults match the Penske Media workflow: every collection on and
    PMCARC phrase augmentation on.
    """

    collections: dict[str, bool] = field(
        default_factory=lambda: {name: True for name in COLLECTION_CODES}
    )
    use_pmcarc: bool = True

    def __post_init__(self) -> None:
        unknown = set(self.collections) - set(COLLECTION_CODES)
        if unknown:
            raise ValueError(
                f"Unknown collection(s): {', '.join(sorted(unknown))}. "
                f"Choose from: {', '.join(COLLECTION_CODES)}"
            )
        # Missing toggles default to off
        self.collections = {
            name: bool(self.collections.get(name, False)) for name in COLLECTION_CODES
        }

    @classmethod
    def only(cls, *names: str, use_pmcarc: bool = True) -> FilterConfig:
        """Build a filter with exactly *names* switched on."""
        return cls(collections={name: True for name in names}, use_pmcarc=use_pmcarc)

    def toggle_collection(self, name: str) -> None:
        if name not in COLLECTION_CODES:
            raise ValueError(f"Unknown collection {name!r}")
        self.collections[name] = not self.collections[name]

    def set_all_collections(self, enabled: bool) -> None:
        self.collections = {name: enabled for name in COLLECTION_CODES}

    @property
    def collection_codes(self) -> str | None:
        """Comma-joined active codes, or ``None`` for an unrestricted search."""
        codes = [COLLECTION_CODES[name] for name, on in self.collections.items() if on]
        return ",".join(codes) if codes else None

    def build_phrase(self, name: str) -> str:
        """Search phrase for a person: bare name, plus marker when enabled."""
        if self.use_pmcarc:
            return f"{name} {PMCARC_MARKER}"
        return name
