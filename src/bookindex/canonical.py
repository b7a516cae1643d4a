"""Canonical form for index labels.

Markup text such as ``[`Vec`](https://doc.rust-lang.org/std/vec/)`` and
``Vec`` written across a line break must land on the same index entry, so
all bookkeeping is keyed on the canonical label rather than the raw text.
"""
from __future__ import annotations

import re

_MD_LINK_RE = re.compile(r"\[(?P<text>[^]]+)\]\((?P<link>[^)]+)\)", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")


def canonicalize(text: str) -> str:
    """Convert raw markup text into the label used as index key.

    Each markdown link is reduced to its display text in a single pass (a
    link nested inside another link text is not re-processed), then every run
    of whitespace (spaces, tabs, newlines) collapses to a single space.

    Args:
        text: Raw content of a markup span.

    Returns:
        The canonical label. Applying it twice gives the same result.
    """
    delinked = _MD_LINK_RE.sub(r"\g<text>", text)
    return _WHITESPACE_RE.sub(" ", delinked)
