"""CLI command: stylescope check -- parse a style file and report diagnostics."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from stylescope.model.diagnostic import Diagnostic, Severity
from stylescope.parser import StyleError, parse_sheet


@click.command()
@click.argument("stylefile", type=click.Path(exists=True))
def check(stylefile: str) -> None:
    """Parse a style file without compiling it.

    Prints diagnostics (errors and warnings) and exits with code 0 if the
    file parses, or code 1 on a fatal error.
    """
    style_path = Path(stylefile)

    try:
        source = style_path.read_text(encoding="utf-8")
        sheet = parse_sheet(source)
    except StyleError as exc:
        diagnostic = Diagnostic(
            rule=type(exc).__name__,
            severity=Severity.ERROR,
            message=exc.message,
            location=exc.location,
        )
        click.echo(str(diagnostic), err=True)
        sys.exit(1)

    diagnostics = [Diagnostic.from_dangling(d) for d in sheet.dangling_declarations()]
    if not diagnostics:
        click.echo(f"OK: {style_path.name} is valid (0 diagnostics)")
        sys.exit(0)

    for diag in diagnostics:
        click.echo(str(diag))

    click.echo()
    click.echo(f"Summary: 0 error(s), {len(diagnostics)} warning(s)")
    sys.exit(0)
