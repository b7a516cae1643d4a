"""Deterministic ordering of index labels and nesting of sub-entries."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

# Markup decoration ignored when ordering labels.
SORT_IGNORED_CHARS = frozenset("_*{}`[]@'")


def sort_key(label: str) -> str:
    """Case- and decoration-insensitive key for a label."""
    return "".join(c for c in label.lower() if c not in SORT_IGNORED_CHARS)


def sort_labels(labels: Iterable[str]) -> list[str]:
    """Order labels alphabetically, ignoring case and markup decoration.

    Sorts twice: first on the raw label, so that "Borrow" precedes
    "borrow", then (stable) on the folded key. Labels that fold to the same
    key therefore always come out in the same relative order, whatever the
    input order was. Duplicates are dropped.
    """
    ordered = sorted(set(labels))
    ordered.sort(key=sort_key)
    return ordered


@dataclass(frozen=True, slots=True)
class NestedIndex:
    """Top-level labels plus the sorted sub-labels filed under each."""

    top_level: list[str]
    sub_entries: dict[str, list[str]] = field(default_factory=dict)

    def children(self, label: str) -> list[str]:
        return self.sub_entries.get(label, [])


class Nester:
    """Files labels under a parent label per the ``nest_under`` table."""

    __slots__ = ("_table",)

    def __init__(self, table: Mapping[str, str]) -> None:
        self._table = table

    def parent_of(self, label: str) -> str | None:
        return self._table.get(label)

    def partition(self, ordered: Iterable[str]) -> NestedIndex:
        """Split an already-sorted label sequence into top level and subs.

        Sub-lists keep the incoming order, so they are sorted as well. A
        sub-label whose parent never shows up at top level is never visited
        by renderers and so drops out of the page.
        """
        top_level: list[str] = []
        sub_entries: dict[str, list[str]] = {}
        for label in ordered:
            parent = self._table.get(label)
            if parent is None:
                top_level.append(label)
            else:
                sub_entries.setdefault(parent, []).append(label)
        return NestedIndex(top_level=top_level, sub_entries=sub_entries)


def display_label(label: str, parent: str | None, *, suppress_head: bool) -> str:
    """Text shown for a label, dropping a redundant "parent, " prefix."""
    if suppress_head and parent is not None:
        head = f"{parent}, "
        if label.startswith(head):
            return label[len(head):]
    return label
