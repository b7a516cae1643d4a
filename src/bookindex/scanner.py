"""Markup scanner for inline index spans.

Recognized forms::

    {{i:text}}    visible entry
    {{hi:text}}   hidden entry (no inline text)
    {{ii:text}}   visible, italic entry
    \\{{i:text}}  escaped; emitted as ``{{i:text}}`` with no index entry

Matching is leftmost-first and non-greedy: the content runs up to the first
``}}``. Only index-shaped mode tokens (a letter or none, then ``i``) are
picked up, so format strings such as ``{{x:?}}`` in code samples are left
alone; a token like ``xi`` is reported and indexed as hidden.
"""
from __future__ import annotations

import itertools
import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from bookindex.canonical import canonicalize
from bookindex.entries import EntryStore, Location, Redirector, format_anchor

if TYPE_CHECKING:
    from bookindex.render import Backend

log = logging.getLogger(__name__)

VISIBLE = "i"
HIDDEN = "hi"
ITALIC = "ii"

_MODE_FLAGS: dict[str, tuple[bool, bool]] = {
    VISIBLE: (True, False),
    HIDDEN: (False, False),
    ITALIC: (True, True),
}

_MARKUP_RE = re.compile(
    r"\\(?P<escaped>\{\{[a-z]?i:.*?\}\})"
    r"|\{\{(?P<mode>[a-z]?i):\s*(?P<content>.*?)\}\}",
    re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class MarkupSpan:
    """One markup occurrence located in chapter text."""

    mode: str
    text: str
    escaped: bool
    char_start: int
    char_end: int

    @property
    def recognized(self) -> bool:
        return self.mode in _MODE_FLAGS

    def flags(self) -> tuple[bool, bool]:
        """(visible, italic) for this span.

        An unknown mode is reported and treated as hidden.
        """
        if not self.recognized:
            log.warning("Unexpected index type '%s' at offset %d!", self.mode, self.char_start)
            return (False, False)
        return _MODE_FLAGS[self.mode]


def find_spans(text: str) -> Iterator[MarkupSpan]:
    """Yield markup spans in document order."""
    for m in _MARKUP_RE.finditer(text):
        escaped = m.group("escaped")
        if escaped is not None:
            mode = escaped[2:escaped.index(":")]
            yield MarkupSpan(mode, escaped, True, m.start(), m.end())
        else:
            yield MarkupSpan(m.group("mode"), m.group("content"), False, m.start(), m.end())


def scan(text: str, replace: Callable[[MarkupSpan], str]) -> str:
    """Rewrite every markup span in ``text``.

    Escaped spans are emitted literally (minus the backslash) without
    calling ``replace``; every other span is replaced by ``replace(span)``.
    """
    pieces: list[str] = []
    pos = 0
    for span in find_spans(text):
        pieces.append(text[pos:span.char_start])
        pieces.append(span.text if span.escaped else replace(span))
        pos = span.char_end
    pieces.append(text[pos:])
    return "".join(pieces)


def index_chapter(
    content: str,
    *,
    path: PurePosixPath | None,
    name: str,
    backend: Backend,
    store: EntryStore,
    redirector: Redirector,
) -> str:
    """Scan one chapter, recording its entries and returning the new text.

    Anchor numbering restarts at ``a001`` for every chapter. Backends that
    do not link back to locations get no anchors and record nothing.
    """
    counter = itertools.count(1)

    def _replace(span: MarkupSpan) -> str:
        visible, italic = span.flags()
        label = canonicalize(span.text)
        log.debug("found %s index entry '%s' which maps to '%s'", span.mode, span.text, label)
        dest = redirector.resolve(label)
        if dest is not None:
            label = dest
            log.debug("...or in fact '%s'", label)

        anchor = None
        if backend.records_locations:
            anchor = format_anchor(next(counter))
            store.add(label, Location(path=path, name=name, anchor=anchor))
        return backend.inline(span.text, label, visible=visible, italic=italic, anchor=anchor)

    return scan(content, _replace)
