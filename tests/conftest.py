"""Shared builders for mdbook preprocessor payloads."""
from __future__ import annotations

from typing import Any

import orjson
import pytest

from bookindex.config import MDBOOK_VERSION


def chapter(
    name: str,
    content: str,
    path: str | None = None,
    sub_items: list[Any] | None = None,
) -> dict[str, Any]:
    return {
        "Chapter": {
            "name": name,
            "content": content,
            "number": None,
            "sub_items": sub_items or [],
            "path": path,
            "source_path": path,
            "parent_names": [],
        }
    }


def context(renderer: str = "html", **indexing: Any) -> dict[str, Any]:
    config: dict[str, Any] = {"book": {"title": "Test book", "src": "src"}}
    config["preprocessor"] = {"indexing": {"command": "index-preprocessor", **indexing}}
    return {
        "root": "/tmp/book",
        "config": config,
        "renderer": renderer,
        "mdbook_version": MDBOOK_VERSION,
    }


def book(*items: Any) -> dict[str, Any]:
    return {"sections": list(items), "__non_exhaustive": None}


@pytest.fixture
def payload_bytes():
    def _build(ctx: dict[str, Any], bk: dict[str, Any]) -> bytes:
        return orjson.dumps([ctx, bk])
    return _build
