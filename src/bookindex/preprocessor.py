"""Index-building session over a whole book.

Phase 1 scans every chapter except those titled ``Index``; phase 2 renders
the index once and writes it into each ``Index`` chapter. All state lives
on the session and is rebuilt for every run.
"""
from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any

from bookindex.book import PreprocessorContext, iter_chapters
from bookindex.config import PREPROCESSOR_NAME, IndexConfig, check_mdbook_version
from bookindex.entries import EntryStore, Redirector
from bookindex.render import select_backend
from bookindex.scanner import index_chapter

log = logging.getLogger(__name__)

INDEX_CHAPTER_NAME = "Index"
UNSUPPORTED_RENDERER = "not-supported"


def supports_renderer(renderer: str) -> bool:
    return renderer != UNSUPPORTED_RENDERER


class IndexPreprocessor:
    """Collects index markup from chapters and renders the index chapter."""

    name = PREPROCESSOR_NAME

    def __init__(self, config: IndexConfig) -> None:
        self.config = config
        self.redirector = Redirector(config.see_instead)
        self.store = EntryStore()

    @classmethod
    def from_context(cls, ctx: PreprocessorContext) -> IndexPreprocessor:
        check_mdbook_version(ctx.mdbook_version)
        return cls(IndexConfig.from_book_config(ctx.config))

    def process_chapter(
        self, renderer: str, path: PurePosixPath | None, name: str, content: str,
    ) -> str:
        """Scan one chapter into the session store and return its new text."""
        backend = select_backend(renderer, self.config)
        return index_chapter(
            content,
            path=path,
            name=name,
            backend=backend,
            store=self.store,
            redirector=self.redirector,
        )

    def generate_index(self, renderer: str) -> str:
        return select_backend(renderer, self.config).generate_index(self.store)

    def run(self, ctx: PreprocessorContext, book: dict[str, Any]) -> dict[str, Any]:
        """Rewrite the book in place and return it."""
        chapters = iter_chapters(book)

        index_chapters = []
        for chapter in chapters:
            if chapter.name == INDEX_CHAPTER_NAME:
                index_chapters.append(chapter)
                continue
            log.info("Indexing chapter '%s'", chapter.name)
            chapter.content = self.process_chapter(
                ctx.renderer, chapter.path, chapter.name, chapter.content,
            )

        if index_chapters:
            page = self.generate_index(ctx.renderer)
            for chapter in index_chapters:
                log.debug("Replacing chapter named '%s' with contents", chapter.name)
                chapter.content = page
        log.info(
            "%s: %d index entries from %d chapters",
            self.name,
            len(self.store),
            len(chapters) - len(index_chapters),
        )
        return book
