"""Stylescope model layer -- public type re-exports."""

from stylescope.model.ast import (
    AtRuleKind,
    Conditional,
    DanglingDeclaration,
    Declaration,
    ScopeContent,
    Selector,
    Sheet,
    StyleRule,
)
from stylescope.model.diagnostic import Diagnostic, Severity
from stylescope.model.fragment import (
    Combinator,
    Fragment,
    Literal,
    NestingMarker,
    Placeholder,
    SelectorFragment,
)
from stylescope.model.location import Location
from stylescope.model.scoped import ScopedAtRule, ScopedItem, ScopedRule

__all__ = [
    # location
    "Location",
    # fragments
    "Literal",
    "Placeholder",
    "NestingMarker",
    "Combinator",
    "Fragment",
    "SelectorFragment",
    # ast
    "AtRuleKind",
    "Declaration",
    "DanglingDeclaration",
    "Selector",
    "StyleRule",
    "Conditional",
    "ScopeContent",
    "Sheet",
    # scoped output
    "ScopedRule",
    "ScopedAtRule",
    "ScopedItem",
    # diagnostic
    "Severity",
    "Diagnostic",
]
