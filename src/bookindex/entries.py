"""Index entry bookkeeping: locations, the entry store, and redirects."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import PurePosixPath

log = logging.getLogger(__name__)

ANCHOR_WIDTH = 3


def format_anchor(number: int) -> str:
    """Chapter-local anchor id for the n-th (1-based) markup span."""
    if number < 1:
        raise ValueError(f"anchor number must be >= 1, got {number}")
    return f"a{number:0{ANCHOR_WIDTH}d}"


@dataclass(frozen=True, slots=True)
class Location:
    """Where one markup span occurred."""

    path: PurePosixPath | None
    name: str
    anchor: str

    def href(self) -> str | None:
        """Link target for this location, or None for pathless chapters."""
        if self.path is None:
            return None
        return f"{self.path.as_posix()}#{self.anchor}"


@dataclass(slots=True)
class EntryStore:
    """Label -> locations, in discovery order.

    Filled during the scan phase only; renderers treat it as read-only.
    """

    _entries: dict[str, list[Location]] = field(default_factory=dict)

    def add(self, label: str, location: Location) -> None:
        self._entries.setdefault(label, []).append(location)
        log.debug("Index entry '%s' found at %s", label, location)

    def locations(self, label: str) -> tuple[Location, ...]:
        return tuple(self._entries.get(label, ()))

    def labels(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, label: object) -> bool:
        return label in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class Redirector:
    """Resolves "see instead" redirects from the session config."""

    __slots__ = ("_table",)

    def __init__(self, table: Mapping[str, str]) -> None:
        self._table = table

    def resolve(self, label: str) -> str | None:
        return self._table.get(label)

    def is_redirect(self, label: str) -> bool:
        return label in self._table

    def labels(self) -> list[str]:
        return list(self._table)

    def check_destination(self, label: str, store: EntryStore) -> bool:
        """Log an error when the redirect target has no entries of its own.

        Returns:
            True if the destination exists in the store.
        """
        dest = self._table[label]
        if dest in store:
            return True
        log.error("Destination of see_instead '%s' => '%s' not in index!", label, dest)
        return False
