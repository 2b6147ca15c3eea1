"""Flat, scoped rules produced by the scoper and consumed by the serializer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScopedRule:
    """A top-level rule with fully resolved selectors.

    An empty ``selectors`` tuple means the declarations are written directly
    into the enclosing at-rule (``@font-face`` descriptors, for example).
    """

    selectors: tuple[str, ...]
    declarations: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class ScopedAtRule:
    """An at-rule wrapping flattened rules, prelude kept verbatim."""

    prelude: str
    items: tuple[ScopedItem, ...]


ScopedItem = ScopedRule | ScopedAtRule
