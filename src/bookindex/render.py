"""Per-renderer output strategies for inline markup and the index page.

Three backends:
  - SkipBackend: renderer listed in ``skip_renderer``; plain text, no index
  - AsciidocBackend: emits ``indexterm:[...]`` and lets AsciiDoc build the index
  - MarkdownBackend: anchors inline plus a linked index page (everything else)
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from bookindex.config import IndexConfig
from bookindex.entries import EntryStore, Redirector
from bookindex.ordering import Nester, display_label, sort_labels

log = logging.getLogger(__name__)

ASCIIDOC_RENDERER = "asciidoc"

INDEX_HEADING = "# Index\n\n"
LINE_END = "<br/>\n"
# Indent for a nest_under sub-entry.
NEST_UNDER_INDENT = "&nbsp;" * 6
# Indent for each location when use_chapter_names is set.
USE_NAMES_INDENT = "&nbsp;" * 6


def _emphasize(content: str, *, visible: bool, italic: bool) -> str:
    if not visible:
        return ""
    return f"*{content}*" if italic else content


class Backend(ABC):
    """Output strategy for one mdbook renderer."""

    # Whether spans get anchors and locations in the entry store.
    records_locations: bool = False

    @abstractmethod
    def inline(
        self,
        content: str,
        label: str,
        *,
        visible: bool,
        italic: bool,
        anchor: str | None,
    ) -> str:
        """Replacement text for one markup span.

        Args:
            content: Raw markup text, as written in the chapter.
            label: Canonical label after redirects.
            visible: Whether the content is shown inline.
            italic: Whether shown content is emphasized.
            anchor: Chapter-local anchor id, or None when locations are not
                recorded.

        Returns:
            The text that replaces the span.
        """

    @abstractmethod
    def generate_index(self, store: EntryStore) -> str:
        """Text that replaces the content of the Index chapter."""


# ---------------------------------------------------------------------------
# Skip
# ---------------------------------------------------------------------------

class SkipBackend(Backend):
    """Renderer that wants the text without any index machinery."""

    records_locations = False

    def inline(
        self,
        content: str,
        label: str,
        *,
        visible: bool,
        italic: bool,
        anchor: str | None,
    ) -> str:
        return _emphasize(content, visible=visible, italic=italic)

    def generate_index(self, store: EntryStore) -> str:
        return ""


# ---------------------------------------------------------------------------
# AsciiDoc (delegating)
# ---------------------------------------------------------------------------

def text_to_asciidoc(text: str) -> str:
    """Strip markdown decoration and escape characters special to AsciiDoc."""
    return (
        text.replace("`", "")
        .strip("*")
        .strip("_")
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def asciidoc_protect(text: str) -> str:
    """Guard an index term against AsciiDoc interpretation.

    A comma would start a nested term, so such terms are quoted. ``(C)``
    would become a copyright sign, so such terms go through ``pass:[]``.
    """
    if "," in text:
        text = f'"{text}"'
    if "(C)" in text:
        text = f"pass:[{text}]"
    return text


class AsciidocBackend(Backend):
    """Delegates index construction to the AsciiDoc toolchain."""

    records_locations = False

    def __init__(self, nester: Nester) -> None:
        self._nester = nester

    def term(self, label: str) -> str:
        """The ``indexterm`` argument for a label, nested where configured."""
        entry = text_to_asciidoc(label)
        parent = self._nester.parent_of(label)
        if parent is None:
            return asciidoc_protect(entry)
        nested = f'{asciidoc_protect(text_to_asciidoc(parent))},"{entry}"'
        log.debug("nested entry '%s'", nested)
        return nested

    def inline(
        self,
        content: str,
        label: str,
        *,
        visible: bool,
        italic: bool,
        anchor: str | None,
    ) -> str:
        term = self.term(label)
        log.debug("asciidoc entry '%s'", term)
        # The indexterm macro needs a separating space even for hidden entries.
        return f"indexterm:[{term}] " + _emphasize(content, visible=visible, italic=italic)

    def generate_index(self, store: EntryStore) -> str:
        return "[index]\n== Index\n"


# ---------------------------------------------------------------------------
# Markdown (default)
# ---------------------------------------------------------------------------

class MarkdownBackend(Backend):
    """Anchors every span and renders a linked index page."""

    records_locations = True

    def __init__(
        self,
        redirector: Redirector,
        nester: Nester,
        *,
        use_chapter_names: bool = False,
        suppress_head: bool = False,
    ) -> None:
        self._redirector = redirector
        self._nester = nester
        self._use_chapter_names = use_chapter_names
        self._suppress_head = suppress_head

    def inline(
        self,
        content: str,
        label: str,
        *,
        visible: bool,
        italic: bool,
        anchor: str | None,
    ) -> str:
        marker = f'<a name="{anchor}"></a>' if anchor is not None else ""
        return marker + _emphasize(content, visible=visible, italic=italic)

    def generate_index(self, store: EntryStore) -> str:
        labels = sort_labels([*store.labels(), *self._redirector.labels()])
        nested = self._nester.partition(labels)

        lines = [INDEX_HEADING]
        for label in nested.top_level:
            lines.append(self.entry_line(store, label))
            for sub in nested.children(label):
                lines.append(self.entry_line(store, sub, parent=label))
        return "".join(lines)

    def entry_line(self, store: EntryStore, label: str, *, parent: str | None = None) -> str:
        """Render one index line, including its terminator."""
        indent = NEST_UNDER_INDENT if parent is not None else ""
        shown = display_label(label, parent, suppress_head=self._suppress_head)

        dest = self._redirector.resolve(label)
        if dest is not None:
            self._redirector.check_destination(label, store)
            return f"{indent}{shown}, see {dest}{LINE_END}"

        parts = [indent, shown]
        for idx, loc in enumerate(store.locations(label), start=1):
            if self._use_chapter_names:
                parts.append(f",{LINE_END}{indent}{USE_NAMES_INDENT}")
                text = loc.name
            else:
                parts.append(", ")
                text = str(idx)
            href = loc.href()
            parts.append(f"[{text}]({href})" if href is not None else text)
        parts.append(LINE_END)
        return "".join(parts)


def select_backend(renderer: str, config: IndexConfig) -> Backend:
    """Pick the output strategy for the renderer mdbook is running."""
    if renderer in config.skip_renderer:
        return SkipBackend()
    nester = Nester(config.nest_under)
    if renderer == ASCIIDOC_RENDERER:
        return AsciidocBackend(nester)
    return MarkdownBackend(
        Redirector(config.see_instead),
        nester,
        use_chapter_names=config.use_chapter_names,
        suppress_head=config.suppress_head,
    )
