"""Session configuration read from ``[preprocessor.indexing]`` in book.toml.

Every recognized option is validated against its expected shape. Anything
malformed is dropped (logged at debug level) instead of failing the build.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

log = logging.getLogger(__name__)

PREPROCESSOR_NAME = "index-preprocessor"
CONFIG_NAMESPACE = ("preprocessor", "indexing")

# mdbook release the JSON protocol handling was written against.
MDBOOK_VERSION = "0.4.52"


def _freeze(mapping: dict[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True, slots=True)
class IndexConfig:
    """Immutable options for one index-build session."""

    skip_renderer: frozenset[str] = frozenset()
    see_instead: Mapping[str, str] = field(default_factory=lambda: _freeze({}))
    nest_under: Mapping[str, str] = field(default_factory=lambda: _freeze({}))
    use_chapter_names: bool = False
    suppress_head: bool = False

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> IndexConfig:
        """Build a config from the ``preprocessor.indexing`` table."""
        skip_renderer = _coerce_renderer_set(options.get("skip_renderer"))
        if skip_renderer:
            log.info("Skipping output for renderers in: %s", ",".join(sorted(skip_renderer)))

        see_instead = _coerce_string_table("see_instead", options.get("see_instead"))
        for key, value in see_instead.items():
            log.info("Index entry '%s' will be 'see %s'", key, value)

        nest_under = _coerce_string_table("nest_under", options.get("nest_under"))
        for key, value in nest_under.items():
            log.info("Index entry '%s' will be nested under '%s'", key, value)

        return cls(
            skip_renderer=skip_renderer,
            see_instead=_freeze(see_instead),
            nest_under=_freeze(nest_under),
            use_chapter_names=_coerce_bool("use_chapter_names", options.get("use_chapter_names")),
            suppress_head=_coerce_bool("suppress_head", options.get("suppress_head")),
        )

    @classmethod
    def from_book_config(cls, config: Mapping[str, Any] | None) -> IndexConfig:
        """Build a config from the whole parsed book.toml."""
        node: Any = config or {}
        for part in CONFIG_NAMESPACE:
            if not isinstance(node, Mapping):
                node = {}
                break
            node = node.get(part, {})
        if not isinstance(node, Mapping):
            log.debug("Ignoring non-table %s section", ".".join(CONFIG_NAMESPACE))
            node = {}
        return cls.from_options(node)


def _coerce_renderer_set(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if not isinstance(value, str):
        log.debug("Ignoring skip_renderer of type %s", type(value).__name__)
        return frozenset()
    return frozenset(name.strip() for name in value.split(",") if name.strip())


def _coerce_string_table(option: str, value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        log.debug("Ignoring %s of type %s", option, type(value).__name__)
        return {}
    out: dict[str, str] = {}
    for key, val in value.items():
        if isinstance(key, str) and isinstance(val, str):
            out[key] = val
        else:
            log.debug("Ignoring %s entry %r = %r", option, key, val)
    return out


def _coerce_bool(option: str, value: Any) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        log.debug("Ignoring %s of type %s", option, type(value).__name__)
        return False
    return value


def _major_minor(version: str) -> tuple[str, ...]:
    return tuple(version.strip().split(".")[:2])


def check_mdbook_version(version: str | None) -> bool:
    """Warn when the calling mdbook differs from the supported release.

    A different major.minor is a warning; a patch-level difference is only
    logged at debug level. Processing continues either way; the return value
    tells callers whether major.minor matched.
    """
    if version is not None and _major_minor(version) == _major_minor(MDBOOK_VERSION):
        if version.strip() != MDBOOK_VERSION:
            log.debug(
                "mdbook %s differs from %s only at patch level", version, MDBOOK_VERSION,
            )
        return True
    log.warning(
        "The %s plugin was built against version %s of mdbook, "
        "but we're being called from version %s",
        PREPROCESSOR_NAME,
        MDBOOK_VERSION,
        version,
    )
    return False
