"""Tests for bookindex.scanner module."""
import logging
from pathlib import PurePosixPath

import pytest

from bookindex.config import IndexConfig
from bookindex.entries import EntryStore, Redirector
from bookindex.render import select_backend
from bookindex.scanner import MarkupSpan, find_spans, index_chapter, scan


def _index(
    content: str,
    *,
    renderer: str = "html",
    config: IndexConfig | None = None,
    store: EntryStore | None = None,
    path: str | None = "ch1.md",
) -> tuple[str, EntryStore]:
    config = config or IndexConfig()
    store = store if store is not None else EntryStore()
    out = index_chapter(
        content,
        path=PurePosixPath(path) if path else None,
        name="Chapter 1",
        backend=select_backend(renderer, config),
        store=store,
        redirector=Redirector(config.see_instead),
    )
    return out, store


class TestFindSpans:
    def test_modes(self) -> None:
        spans = list(find_spans("{{i:a}} {{hi:b}} {{ii:c}}"))
        assert [(s.mode, s.text) for s in spans] == [("i", "a"), ("hi", "b"), ("ii", "c")]
        assert not any(s.escaped for s in spans)

    def test_offsets(self) -> None:
        text = "see {{i:Foo}} here"
        (span,) = find_spans(text)
        assert text[span.char_start:span.char_end] == "{{i:Foo}}"

    def test_leading_whitespace_ignored(self) -> None:
        (span,) = find_spans("{{i:   Foo}}")
        assert span.text == "Foo"

    def test_multiline_content(self) -> None:
        (span,) = find_spans("{{i:generic\n  types}}")
        assert span.text == "generic\n  types"

    def test_non_greedy(self) -> None:
        spans = list(find_spans("{{i:a}} and {{i:b}}"))
        assert [s.text for s in spans] == ["a", "b"]

    def test_closes_at_first_braces(self) -> None:
        spans = list(find_spans(r"{{i:\}} and {{i:Foo}}"))
        assert [s.text for s in spans] == ["\\", "Foo"]

    def test_format_strings_ignored(self) -> None:
        assert list(find_spans('println!("{{x:?}} {{name:>8}}", 1);')) == []

    def test_escaped_span(self) -> None:
        (span,) = find_spans(r"write \{{i:Foo}} to index")
        assert span.escaped
        assert span.text == "{{i:Foo}}"
        assert span.mode == "i"

    def test_other_mdbook_directives_untouched(self) -> None:
        assert list(find_spans("{{#include file.rs:2}} {{#title Foo}}")) == []

    def test_unknown_mode(self, caplog: pytest.LogCaptureFixture) -> None:
        (span,) = find_spans("{{xi:Foo}}")
        assert not span.recognized
        with caplog.at_level(logging.WARNING):
            assert span.flags() == (False, False)
        assert "Unexpected index type" in caplog.text


class TestScan:
    def test_replaces_in_place(self) -> None:
        out = scan("a {{i:x}} b {{hi:y}} c", lambda span: span.text.upper())
        assert out == "a X b Y c"

    def test_escape_not_passed_to_callback(self) -> None:
        seen: list[MarkupSpan] = []

        def _replace(span: MarkupSpan) -> str:
            seen.append(span)
            return "!"

        out = scan(r"\{{i:x}} {{i:y}}", _replace)
        assert out == "{{i:x}} !"
        assert [s.text for s in seen] == ["y"]

    def test_no_markup(self) -> None:
        assert scan("plain text", lambda span: "!") == "plain text"


class TestIndexChapter:
    def test_visible(self) -> None:
        out, store = _index("a {{i:Foo}} b")
        assert out == 'a <a name="a001"></a>Foo b'
        assert [loc.anchor for loc in store.locations("Foo")] == ["a001"]

    def test_hidden_and_italic(self) -> None:
        out, _ = _index("{{hi:Foo}}{{ii:Bar}}")
        assert out == '<a name="a001"></a><a name="a002"></a>*Bar*'

    def test_anchor_sequence(self) -> None:
        _, store = _index("{{i:x}} {{i:y}} {{i:x}}")
        anchors = [loc.anchor for label in store.labels() for loc in store.locations(label)]
        assert sorted(anchors) == ["a001", "a002", "a003"]
        assert [loc.anchor for loc in store.locations("x")] == ["a001", "a003"]

    def test_anchors_restart_per_chapter(self) -> None:
        store = EntryStore()
        _index("{{i:x}}", store=store)
        _index("{{i:x}}", store=store, path="ch2.md")
        assert [loc.anchor for loc in store.locations("x")] == ["a001", "a001"]

    def test_escape_creates_no_entry(self) -> None:
        out, store = _index(r"\{{i:x}} {{i:y}}")
        assert out == '{{i:x}} <a name="a001"></a>y'
        assert store.labels() == ["y"]

    def test_link_markup_canonicalized(self) -> None:
        out, store = _index("{{i:[`Vec`](https://doc.rust-lang.org/std/vec/)}}")
        assert store.labels() == ["`Vec`"]
        assert out.endswith("[`Vec`](https://doc.rust-lang.org/std/vec/)")

    def test_redirect_applied_before_recording(self) -> None:
        config = IndexConfig(see_instead={"unit type": "`()`"})
        out, store = _index("{{hi:unit type}}", config=config)
        assert out == '<a name="a001"></a>'
        assert store.labels() == ["`()`"]

    def test_redirect_shows_original_content(self) -> None:
        config = IndexConfig(see_instead={"unit type": "`()`"})
        out, _ = _index("{{i:unit   type}}", config=config)
        assert out == '<a name="a001"></a>unit   type'

    def test_unknown_mode_still_recorded(self) -> None:
        out, store = _index("{{zi:Foo}}")
        assert out == '<a name="a001"></a>'
        assert store.labels() == ["Foo"]

    def test_trailing_backslash_label_does_not_swallow_next_span(self) -> None:
        out, store = _index(r"{{i:\}} and {{i:Foo}}")
        assert store.labels() == ["\\", "Foo"]
        assert out == '<a name="a001"></a>\\ and <a name="a002"></a>Foo'

    def test_rust_code_sample_untouched(self, caplog: pytest.LogCaptureFixture) -> None:
        sample = '```rust\nprintln!("{{x:?}}", 1);\n```'
        with caplog.at_level(logging.WARNING):
            out, store = _index(sample)
        assert out == sample
        assert len(store) == 0
        assert "Unexpected index type" not in caplog.text

    def test_location_fields(self) -> None:
        _, store = _index("{{i:x}}", path=None)
        (loc,) = store.locations("x")
        assert loc.path is None
        assert loc.name == "Chapter 1"

    def test_skip_backend_records_nothing(self) -> None:
        config = IndexConfig(skip_renderer=frozenset({"X"}))
        out, store = _index("{{i:Foo}} {{ii:Bar}} {{hi:Baz}}", renderer="X", config=config)
        assert out == "Foo *Bar* "
        assert len(store) == 0

    def test_asciidoc_records_nothing(self) -> None:
        out, store = _index("{{i:Foo}}", renderer="asciidoc")
        assert out == "indexterm:[Foo] Foo"
        assert len(store) == 0
