"""Placeholder expansion transform: replaces ``${name}`` fragments with values."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from stylescope.model.ast import Conditional, Declaration, ScopeContent, Selector, Sheet, StyleRule
from stylescope.model.fragment import Literal, Placeholder
from stylescope.parser.errors import InterpolationError

PlaceholderValues = Mapping[str, Any] | Sequence[Any]


def render_value(value: Any) -> str:
    """The CSS text a placeholder value is substituted with."""
    return str(value)


def lookup(values: PlaceholderValues | None, placeholder: Placeholder) -> Any:
    """Find the value for *placeholder* by name, or by index for ``${0}``."""
    if isinstance(values, Mapping):
        if placeholder.name in values:
            return values[placeholder.name]
    elif values is not None and not isinstance(values, str):
        index = placeholder.index
        if index is not None and index < len(values):
            return values[index]
    raise InterpolationError(f"no value for placeholder '{placeholder}'", placeholder.location)


class PlaceholderExpansionTransform:
    """Replace every placeholder in a sheet with the rendered value.

    Dangling declarations are left untouched since they are never emitted.
    """

    def __init__(self, values: PlaceholderValues | None = None) -> None:
        self.values = values

    def apply(self, sheet: Sheet) -> Sheet:
        return Sheet(tuple(self._content(item) for item in sheet.contents))

    def _content(self, item: ScopeContent) -> ScopeContent:
        if isinstance(item, Conditional):
            return replace(item, condition=self._fragments(item.condition), sheet=self.apply(item.sheet))
        return replace(
            item,
            selectors=tuple(Selector(self._fragments(s.fragments, merge=False)) for s in item.selectors),
            declarations=tuple(self._declaration(d) for d in item.declarations),
            nested=tuple(self._content(child) for child in item.nested),
        )

    def _declaration(self, decl: Declaration) -> Declaration:
        if decl.is_dangling:
            return decl
        key = self._fragments((decl.key,))
        return replace(decl, key=key[0] if key else Literal(""), value=self._fragments(decl.value))

    def _fragments(self, fragments: tuple, merge: bool = True) -> tuple:
        """Substitute placeholders, merging adjacent literal text if *merge*."""
        # Selector fragments stay separate so each simple selector is kept whole.
        out: list = []
        for fragment in fragments:
            if isinstance(fragment, Placeholder):
                fragment = Literal(render_value(lookup(self.values, fragment)))
            if merge and isinstance(fragment, Literal) and out and isinstance(out[-1], Literal):
                out[-1] = Literal(out[-1].text + fragment.text)
            else:
                out.append(fragment)
        return tuple(out)


def expand_placeholders(sheet: Sheet, values: PlaceholderValues | None = None) -> Sheet:
    """Return *sheet* with all placeholders substituted from *values*."""
    return PlaceholderExpansionTransform(values).apply(sheet)
