"""Scoping transform: qualifies selectors with a scope class and flattens nesting.

Selector joining rules:
    - At the top level the scope class is compounded onto the selector:
      ``.a`` -> ``.C.a``, ``div`` -> ``div.C``, ``:hover`` -> ``.C:hover``,
      ``:root`` -> ``.C``, ``> .b`` -> ``.C > .b``.
    - A nested selector containing ``&`` has every ``&`` replaced by the
      parent selector; one starting with a combinator is appended to the
      parent; anything else becomes a descendant of the parent.
    - Global styles (no scope class) keep their selectors as written and
      resolve ``&`` to ``:root``.

Rules are emitted depth-first in source order, a rule's own declarations
before its nested rules. At-rules wrap the flattened output of their body;
keyframes-like bodies are emitted without scoping.
"""

from __future__ import annotations

from collections.abc import Iterator

from stylescope.model.ast import Conditional, ScopeContent, Selector, Sheet, StyleRule
from stylescope.model.fragment import Combinator, Literal, NestingMarker, Placeholder
from stylescope.model.scoped import ScopedAtRule, ScopedItem, ScopedRule
from stylescope.parser.errors import InterpolationError

# A selector with nesting markers resolved: only literals and combinators.
Resolved = tuple[Literal | Combinator, ...]

_ROOT = ":root"


def _text(fragments: tuple) -> str:
    parts = []
    for fragment in fragments:
        if isinstance(fragment, Placeholder):
            raise InterpolationError(f"unresolved placeholder '{fragment}'", fragment.location)
        parts.append(str(fragment))
    return "".join(parts)


def _is_type_selector(fragment: Literal | Combinator) -> bool:
    if not isinstance(fragment, Literal) or not fragment.text:
        return False
    first = fragment.text[0]
    return first == "*" or first == "_" or first.isalpha()


class Scoper:
    """Flatten a sheet into scoped rules under *class_name*.

    ``class_name=None`` produces a global (unscoped) style.
    """

    def __init__(self, class_name: str | None) -> None:
        self.class_name = class_name

    @property
    def root(self) -> Literal:
        return Literal(f".{self.class_name}") if self.class_name else Literal(_ROOT)

    def scope(self, sheet: Sheet) -> tuple[ScopedItem, ...]:
        return tuple(self._visit(sheet.contents, None, scoped=True))

    # --- traversal ------------------------------------------------------------

    def _visit(
        self, contents: tuple[ScopeContent, ...], context: list[Resolved] | None, scoped: bool
    ) -> Iterator[ScopedItem]:
        for item in contents:
            if isinstance(item, Conditional):
                yield from self._visit_conditional(item, context, scoped)
            else:
                yield from self._visit_rule(item, context, scoped)

    def _visit_conditional(
        self, item: Conditional, context: list[Resolved] | None, scoped: bool
    ) -> Iterator[ScopedItem]:
        if item.kind.is_scoped and scoped:
            items = tuple(self._visit(item.sheet.contents, context, scoped=True))
        else:
            items = tuple(self._visit(item.sheet.contents, None, scoped=False))
        if items or not item.kind.is_scoped:
            yield ScopedAtRule(prelude=self._prelude(item), items=items)

    def _visit_rule(
        self, rule: StyleRule, context: list[Resolved] | None, scoped: bool
    ) -> Iterator[ScopedItem]:
        selectors = self._effective(rule, context, scoped)
        declarations = tuple(
            (_text((decl.key,)), _text(decl.value)) for decl in rule.declarations if not decl.is_dangling
        )
        if declarations:
            yield ScopedRule(
                selectors=tuple(_text(s) for s in selectors),
                declarations=declarations,
            )
        yield from self._visit(rule.nested, selectors or None, scoped)

    def _prelude(self, item: Conditional) -> str:
        condition = _text(item.condition)
        return f"@{item.name} {condition}" if condition else f"@{item.name}"

    # --- selectors ------------------------------------------------------------

    def _effective(
        self, rule: StyleRule, context: list[Resolved] | None, scoped: bool
    ) -> list[Resolved]:
        if not rule.selectors:
            if context is not None:
                return context
            return [(self.root,)] if scoped else []
        if context is None:
            if not scoped:
                return [self._verbatim(s) for s in rule.selectors]
            return [self._qualify(s) for s in rule.selectors]
        return [self._nest(child, parent) for parent in context for child in rule.selectors]

    def _verbatim(self, selector: Selector) -> Resolved:
        return tuple(Literal("&") if isinstance(f, NestingMarker) else f for f in selector.fragments)

    def _substitute(self, selector: Selector, parent: Resolved) -> Resolved:
        out: list[Literal | Combinator] = []
        for fragment in selector.fragments:
            if isinstance(fragment, NestingMarker):
                out.extend(parent)
            else:
                out.append(fragment)
        return tuple(out)

    def _qualify(self, selector: Selector) -> Resolved:
        """Attach the scope class to a top-level selector."""
        root = self.root
        if self.class_name is None or selector.has_nesting_marker:
            return self._substitute(selector, (root,))

        fragments = list(selector.fragments)
        if selector.starts_with_combinator:
            return (root, *fragments)

        # The scope class joins the first compound selector.
        compound_end = next(
            (i for i, f in enumerate(fragments) if isinstance(f, Combinator)), len(fragments)
        )
        for index in range(compound_end):
            if fragments[index] == Literal(_ROOT):
                fragments[index] = root
                return tuple(fragments)
        position = 1 if _is_type_selector(fragments[0]) else 0
        fragments.insert(position, root)
        return tuple(fragments)

    def _nest(self, child: Selector, parent: Resolved) -> Resolved:
        if child.has_nesting_marker:
            return self._substitute(child, parent)
        if child.starts_with_combinator:
            return (*parent, *child.fragments)
        return (*parent, Combinator(" "), *child.fragments)


def scope_sheet(sheet: Sheet, class_name: str | None) -> tuple[ScopedItem, ...]:
    """Flatten *sheet* into top-level rules scoped under *class_name*."""
    return Scoper(class_name).scope(sheet)
