#!/usr/bin/env python3
"""mdbook preprocessor that assembles an index from inline markup.

Phrases in ``{{i:<text>}}`` stay in the output and get an index entry;
``{{hi:<text>}}`` is removed from the output but still indexed;
``{{ii:<text>}}`` is indexed and shown in italics. ``\\{{i:<text>}}`` is
left as literal ``{{i:<text>}}``. A chapter titled "Index" is replaced by
the accumulated index.

Usage (book.toml):
    [preprocessor.indexing]
    command = "python3 scripts/index_preprocessor.py"

    [preprocessor.indexing.see_instead]
    "unit type" = "`()`"

    [preprocessor.indexing.nest_under]
    "generic type" = "generics"

Check renderer support (exit status 0 = supported, 1 = not):
    python3 scripts/index_preprocessor.py supports html
"""
from __future__ import annotations

import argparse
import logging
import sys

from bookindex.book import BookFormatError, dump_book, parse_input
from bookindex.preprocessor import IndexPreprocessor, supports_renderer

log = logging.getLogger("index_preprocessor")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="index-preprocessor",
        description="An mdbook preprocessor which collates an index",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose (debug) logging on stderr",
    )
    sub = parser.add_subparsers(dest="command")
    supports = sub.add_parser(
        "supports", help="Check whether a renderer is supported by this preprocessor",
    )
    supports.add_argument("renderer")
    return parser


def run_preprocessor() -> int:
    try:
        ctx, book = parse_input(sys.stdin.buffer.read())
        preprocessor = IndexPreprocessor.from_context(ctx)
        processed = preprocessor.run(ctx, book)
    except BookFormatError as exc:
        log.error("Failed to process book: %s", exc)
        return 1
    sys.stdout.buffer.write(dump_book(processed))
    sys.stdout.buffer.flush()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    if args.command == "supports":
        return 0 if supports_renderer(args.renderer) else 1
    return run_preprocessor()


if __name__ == "__main__":
    sys.exit(main())
