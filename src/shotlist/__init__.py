"""Script-to-Getty shotlist generator: extraction, search, curation, export."""

__version__ = "0.1.0"

from shotlist.models import (
    FilterConfig,
    GettyMedia,
    MediaKind,
    Person,
    PersonGettyResults,
    SelectedItem,
    SelectionKey,
)

__all__ = [
    "FilterConfig",
    "GettyMedia",
    "MediaKind",
    "Person",
    "PersonGettyResults",
    "SelectedItem",
    "SelectionKey",
    "__version__",
]
