"""CLI command: stylescope compile -- compile a style file to scoped CSS."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from stylescope.config import RegistryConfig
from stylescope.parser import StyleError
from stylescope.registry import StyleRegistry


def _parse_vars(pairs: tuple[str, ...]) -> dict[str, str]:
    values: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {pair!r}", param_hint="--var")
        values[name] = value
    return values


@click.command("compile")
@click.argument("stylefile", type=click.Path(exists=True))
@click.option("--global", "is_global", is_flag=True, help="Do not scope selectors to a class.")
@click.option("--var", "variables", multiple=True, metavar="NAME=VALUE", help="Value for a ${NAME} placeholder.")
@click.option("--prefix", default=RegistryConfig.class_prefix, show_default=True, help="Class name prefix.")
def compile_command(stylefile: str, is_global: bool, variables: tuple[str, ...], prefix: str) -> None:
    """Compile a style file and print its class name and CSS.

    Warnings for malformed declarations go to stderr. Exits with code 1 if
    the file does not compile.
    """
    values = _parse_vars(variables)
    registry = StyleRegistry(RegistryConfig(class_prefix=prefix))

    try:
        source = Path(stylefile).read_text(encoding="utf-8")
        style = registry.compile(source, values, is_global=is_global)
    except StyleError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    for warning in style.warnings:
        click.echo(str(warning), err=True)

    click.echo(f"/* {style.class_name} */")
    if style.css_text:
        click.echo(style.css_text)
