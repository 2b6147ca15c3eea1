"""Deterministic CSS rendering of scoped rules.

Output format::

    .stylescope-abc.a {
      color: red;
    }
    @media (min-width: 600px) {
      .stylescope-abc.a {
        color: blue;
      }
    }

Blocks are separated by a newline and the text carries no trailing
whitespace, so equal input always renders byte-identical output.
"""

from __future__ import annotations

from collections.abc import Iterable

from stylescope.model.scoped import ScopedAtRule, ScopedItem, ScopedRule

__all__ = ["serialize"]


def _write_rule(rule: ScopedRule, lines: list[str], indent: str, depth: int) -> None:
    pad = indent * depth
    if not rule.selectors:
        # Descriptors written straight into the enclosing at-rule.
        for key, value in rule.declarations:
            lines.append(f"{pad}{key}: {value};")
        return
    lines.append(f"{pad}{', '.join(rule.selectors)} {{")
    for key, value in rule.declarations:
        lines.append(f"{pad}{indent}{key}: {value};")
    lines.append(f"{pad}}}")


def _write(items: Iterable[ScopedItem], lines: list[str], indent: str, depth: int) -> None:
    for item in items:
        if isinstance(item, ScopedAtRule):
            pad = indent * depth
            lines.append(f"{pad}{item.prelude} {{")
            _write(item.items, lines, indent, depth + 1)
            lines.append(f"{pad}}}")
        else:
            _write_rule(item, lines, indent, depth)


def serialize(items: Iterable[ScopedItem], indent: str = "  ") -> str:
    """Render scoped rules to canonical CSS text."""
    lines: list[str] = []
    _write(items, lines, indent, 0)
    return "\n".join(line.rstrip() for line in lines)
