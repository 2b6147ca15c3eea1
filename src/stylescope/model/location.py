"""Source locations used by tokens, AST nodes and diagnostics."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    """A span of the source text.

    Attributes:
        start: Offset of the first character of the span.
        end: Offset one past the last character of the span.
        line: 1-based line number of ``start``.
        column: 1-based column number of ``start``.
    """

    start: int
    end: int
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"

    def slice(self, source: str) -> str:
        """Return the text this location covers in *source*."""
        return source[self.start : self.end]
