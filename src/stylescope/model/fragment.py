"""Fragments: the pieces of literal or dynamic content stored in the AST."""

from __future__ import annotations

from dataclasses import dataclass, field

from stylescope.model.location import Location


@dataclass(frozen=True)
class Literal:
    """Literal source text."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Placeholder:
    """Reference to an externally supplied value, written ``${name}``."""

    name: str
    location: Location | None = field(default=None, compare=False)

    @property
    def index(self) -> int | None:
        """The positional index for ``${0}``-style placeholders."""
        return int(self.name) if self.name.isdigit() else None

    def __str__(self) -> str:
        return "${" + self.name + "}"


@dataclass(frozen=True)
class NestingMarker:
    """The ``&`` selector: the parent selector at this position."""

    def __str__(self) -> str:
        return "&"


@dataclass(frozen=True)
class Combinator:
    """A selector combinator: descendant (space), child, or sibling."""

    op: str  # " ", ">", "+", "~"

    @property
    def is_descendant(self) -> bool:
        return self.op == " "

    def __str__(self) -> str:
        return " " if self.is_descendant else f" {self.op} "


Fragment = Literal | Placeholder
SelectorFragment = Literal | Placeholder | NestingMarker | Combinator


def render_fragments(fragments: tuple[Fragment, ...] | list[Fragment]) -> str:
    """Concatenate fragments into text; placeholders render as ``${name}``."""
    return "".join(str(f) for f in fragments)
