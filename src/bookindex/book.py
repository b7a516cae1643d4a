"""mdbook preprocessor protocol: ``[context, book]`` JSON in, book JSON out.

The book is kept as the decoded JSON tree and edited in place, so fields
this package does not know about survive the round trip untouched.
"""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any

import orjson

_ITEM_KEYS = ("sections", "items")


class BookFormatError(ValueError):
    """Host input is not a well-formed mdbook preprocessor payload."""


@dataclass(frozen=True, slots=True)
class PreprocessorContext:
    root: str | None
    config: dict[str, Any]
    renderer: str
    mdbook_version: str | None


class Chapter:
    """View over one chapter object in the book JSON."""

    __slots__ = ("_raw",)

    def __init__(self, raw: dict[str, Any]) -> None:
        if not isinstance(raw.get("name"), str):
            raise BookFormatError("chapter without a string 'name'")
        if not isinstance(raw.get("content"), str):
            raise BookFormatError(f"chapter {raw['name']!r} has no string 'content'")
        self._raw = raw

    @property
    def name(self) -> str:
        return self._raw["name"]

    @property
    def path(self) -> PurePosixPath | None:
        path = self._raw.get("path")
        return PurePosixPath(path) if isinstance(path, str) and path else None

    @property
    def content(self) -> str:
        return self._raw["content"]

    @content.setter
    def content(self, value: str) -> None:
        self._raw["content"] = value


def parse_input(data: bytes | str) -> tuple[PreprocessorContext, dict[str, Any]]:
    """Decode the payload mdbook writes to the preprocessor's stdin."""
    try:
        payload = orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise BookFormatError(f"input is not valid JSON: {exc}") from exc

    if not isinstance(payload, list) or len(payload) != 2:
        raise BookFormatError("input must be a JSON array of [context, book]")
    raw_ctx, book = payload
    if not isinstance(raw_ctx, dict) or not isinstance(book, dict):
        raise BookFormatError("context and book must both be JSON objects")

    renderer = raw_ctx.get("renderer")
    if not isinstance(renderer, str):
        raise BookFormatError("context has no string 'renderer'")
    config = raw_ctx.get("config")
    version = raw_ctx.get("mdbook_version")
    root = raw_ctx.get("root")
    ctx = PreprocessorContext(
        root=root if isinstance(root, str) else None,
        config=config if isinstance(config, dict) else {},
        renderer=renderer,
        mdbook_version=version if isinstance(version, str) else None,
    )
    _book_items(book)
    return ctx, book


def _book_items(book: dict[str, Any]) -> list[Any]:
    for key in _ITEM_KEYS:
        items = book.get(key)
        if isinstance(items, list):
            return items
    raise BookFormatError("book has no 'sections' or 'items' list")


def _walk(items: list[Any]) -> Iterator[Chapter]:
    for item in items:
        if not isinstance(item, dict) or "Chapter" not in item:
            # "Separator" and {"PartTitle": ...}
            continue
        raw = item["Chapter"]
        if not isinstance(raw, dict):
            raise BookFormatError("chapter item is not a JSON object")
        chapter = Chapter(raw)
        sub_items = raw.get("sub_items") or []
        if not isinstance(sub_items, list):
            raise BookFormatError(f"chapter {chapter.name!r} has malformed 'sub_items'")
        yield from _walk(sub_items)
        yield chapter


def iter_chapters(book: dict[str, Any]) -> list[Chapter]:
    """All chapters, sub-chapters before their parent (mdbook visit order).

    Every chapter is validated before any is returned, so a malformed book
    fails before anything has been modified.
    """
    return list(_walk(_book_items(book)))


def dump_book(book: dict[str, Any]) -> bytes:
    return orjson.dumps(book)
