"""Style AST: Sheet, StyleRule, Conditional, Selector and Declaration.

The tree mirrors the source structure before scoping. Nodes are frozen and
hold tuples so a parsed sheet is immutable and hashable.

Example source and its shape::

    color: red;                         StyleRule(selectors=(), ...)
    .a { &:hover { color: blue; } }     StyleRule(.a, nested=(StyleRule(&:hover),))
    @media (min-width: 600px) { ... }   Conditional(MEDIA, sheet=Sheet(...))
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from stylescope.model.fragment import (
    Combinator,
    Fragment,
    Literal,
    NestingMarker,
    SelectorFragment,
    render_fragments,
)
from stylescope.model.location import Location


class AtRuleKind(Enum):
    """Classification of an at-rule by how its body is treated."""

    MEDIA = "media"
    SUPPORTS = "supports"
    KEYFRAMES = "keyframes"  # body is emitted without scoping
    OTHER = "other"

    @classmethod
    def from_name(cls, name: str) -> AtRuleKind:
        lowered = name.lower()
        if lowered == "media":
            return cls.MEDIA
        if lowered == "supports":
            return cls.SUPPORTS
        if lowered.endswith("keyframes") or lowered in _UNSCOPED_AT_RULES:
            return cls.KEYFRAMES
        return cls.OTHER

    @property
    def is_scoped(self) -> bool:
        return self is not AtRuleKind.KEYFRAMES


# At-rules whose body holds descriptors or frames rather than selectors.
_UNSCOPED_AT_RULES = frozenset(
    {"font-face", "page", "property", "counter-style", "font-feature-values"}
)


@dataclass(frozen=True)
class Declaration:
    """A ``key: value`` pair."""

    key: Fragment
    value: tuple[Fragment, ...]
    location: Location | None = field(default=None, compare=False)

    @property
    def is_dangling(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.key}: {render_fragments(self.value)}"


@dataclass(frozen=True)
class DanglingDeclaration(Declaration):
    """A declaration that failed validation, kept for diagnostics only."""

    reason: str = ""

    @property
    def is_dangling(self) -> bool:
        return True


@dataclass(frozen=True)
class Selector:
    """One complex selector, e.g. ``& > .item:hover``."""

    fragments: tuple[SelectorFragment, ...]

    @property
    def has_nesting_marker(self) -> bool:
        return any(isinstance(f, NestingMarker) for f in self.fragments)

    @property
    def starts_with_combinator(self) -> bool:
        return bool(self.fragments) and isinstance(self.fragments[0], Combinator)

    def __str__(self) -> str:
        return "".join(str(f) for f in self.fragments).strip()

    @classmethod
    def of(cls, *parts: str | SelectorFragment) -> Selector:
        """Build a selector from strings and fragments; handy in tests."""
        return cls(tuple(Literal(p) if isinstance(p, str) else p for p in parts))


@dataclass(frozen=True)
class StyleRule:
    """A qualified rule with declarations and nested content.

    An empty ``selectors`` tuple stands for the enclosing context itself, so
    declarations written at the root of a style (or directly inside an
    at-rule) apply to the scope class.
    """

    selectors: tuple[Selector, ...]
    declarations: tuple[Declaration, ...] = ()
    nested: tuple[ScopeContent, ...] = ()
    location: Location | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Conditional:
    """An at-rule block such as ``@media``, ``@supports`` or ``@keyframes``."""

    kind: AtRuleKind
    name: str
    condition: tuple[Fragment, ...]
    sheet: Sheet
    location: Location | None = field(default=None, compare=False)

    @property
    def prelude(self) -> str:
        condition = render_fragments(self.condition)
        return f"@{self.name} {condition}" if condition else f"@{self.name}"


ScopeContent = StyleRule | Conditional


@dataclass(frozen=True)
class Sheet:
    """The root of a parsed style: an ordered sequence of scope contents."""

    contents: tuple[ScopeContent, ...] = ()

    def __iter__(self) -> Iterator[ScopeContent]:
        return iter(self.contents)

    def __len__(self) -> int:
        return len(self.contents)

    def dangling_declarations(self) -> Iterator[DanglingDeclaration]:
        """Yield every dangling declaration in source order."""
        found = list(_collect_dangling(self.contents))
        # Declarations and nested rules interleave in the source.
        found.sort(key=lambda d: d.location.start if d.location is not None else 0)
        yield from found


def _collect_dangling(contents: tuple[ScopeContent, ...]) -> Iterator[DanglingDeclaration]:
    for item in contents:
        if isinstance(item, Conditional):
            yield from _collect_dangling(item.sheet.contents)
            continue
        for decl in item.declarations:
            if isinstance(decl, DanglingDeclaration):
                yield decl
        yield from _collect_dangling(item.nested)
