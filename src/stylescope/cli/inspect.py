"""CLI command: stylescope inspect -- display the parsed rule tree."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from stylescope.model.ast import Conditional, ScopeContent
from stylescope.model.fragment import render_fragments
from stylescope.parser import StyleError, parse_sheet


def _echo_tree(contents: tuple[ScopeContent, ...], depth: int) -> None:
    pad = "  " * depth
    for item in contents:
        if isinstance(item, Conditional):
            click.echo(f"{pad}{item.prelude}  [{item.kind.value}]")
            _echo_tree(item.sheet.contents, depth + 1)
            continue
        selectors = ", ".join(str(s) for s in item.selectors) or "&"
        click.echo(f"{pad}{selectors}")
        for decl in item.declarations:
            marker = "  (dangling)" if decl.is_dangling else ""
            click.echo(f"{pad}  {decl.key}: {render_fragments(decl.value)}{marker}")
        _echo_tree(item.nested, depth + 1)


@click.command()
@click.argument("stylefile", type=click.Path(exists=True))
def inspect(stylefile: str) -> None:
    """Parse a style file and display its rule tree.

    Shows at-rules with their kind, rules with their selectors, and each
    declaration, before any scoping or flattening.
    """
    try:
        source = Path(stylefile).read_text(encoding="utf-8")
        sheet = parse_sheet(source)
    except StyleError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Items: {len(sheet)}")
    _echo_tree(sheet.contents, 0)
