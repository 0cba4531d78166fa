"""Text commands for interactive curation.

Person and item numbers are 1-based as displayed; kinds are ``v``
(video) or ``p`` (photo)::

    t 2 v 3   toggle video #3 of person #2
    a 2 p     select all photos of person #2
    n 2 p     deselect all photos of person #2
    A v       select every video of every person
    N v       deselect every video
"""

from __future__ import annotations

from shotlist.models import MediaKind
from shotlist.workflow.controller import WorkflowController

KIND_ALIASES: dict[str, MediaKind] = {
    "v": MediaKind.VIDEO,
    "video": MediaKind.VIDEO,
    "videos": MediaKind.VIDEO,
    "p": MediaKind.PHOTO,
    "photo": MediaKind.PHOTO,
    "photos": MediaKind.PHOTO,
}

HELP_TEXT = (
    "t P K N  toggle item N | a P K  select all | n P K  deselect all | "
    "A K / N K  select/deselect all people | l  list | done"
)


def parse_kind(token: str) -> MediaKind:
    try:
        return KIND_ALIASES[token.lower()]
    except KeyError:
        raise ValueError(f"Unknown media kind {token!r} (use v or p)") from None


def _parse_index(token: str, size: int, label: str) -> int:
    """Convert a 1-based display number into a 0-based index."""
    try:
        number = int(token)
    except ValueError:
        raise ValueError(f"{label} must be a number, got {token!r}") from None
    if not 1 <= number <= size:
        raise ValueError(f"{label} {number} out of range (1-{size})")
    return number - 1


def apply_command(controller: WorkflowController, command: str) -> str:
    """Apply one curation command and describe what happened.

    Raises:
        ValueError: On an unknown or malformed command.
    """
    parts = command.split()
    if not parts:
        raise ValueError("Empty command")

    verb, args = parts[0], parts[1:]
    results = controller.results

    if verb == "t" and len(args) == 3:
        person = _parse_index(args[0], len(results), "Person")
        kind = parse_kind(args[1])
        items = results[person].items_of(kind)
        if not items:
            raise ValueError(f"Person {person + 1} has no {kind.plural}")
        media = items[_parse_index(args[2], len(items), "Item")]
        selected = controller.toggle(person, media, kind)
        return f"{'Selected' if selected else 'Deselected'} {kind.value} {media.id}"

    if verb in ("a", "n") and len(args) == 2:
        person = _parse_index(args[0], len(results), "Person")
        kind = parse_kind(args[1])
        name = results[person].person.name
        if verb == "a":
            controller.select_all_of_kind(person, kind)
            return f"Selected all {kind.plural} for {name}"
        controller.deselect_all_of_kind(person, kind)
        return f"Deselected all {kind.plural} for {name}"

    if verb in ("A", "N") and len(args) == 1:
        kind = parse_kind(args[0])
        if verb == "A":
            controller.select_all_global(kind)
            return f"Selected all {kind.plural}"
        controller.deselect_all_global(kind)
        return f"Deselected all {kind.plural}"

    raise ValueError(f"Unknown command {command!r}. {HELP_TEXT}")
