"""Stylescope CLI entry point: Click group with subcommands."""

import logging

import click

from stylescope import __version__


@click.group()
@click.version_option(version=__version__, prog_name="stylescope")
@click.option("--verbose", "-v", is_flag=True, help="Log registry activity to stderr.")
def cli(verbose: bool) -> None:
    """Stylescope - compile nested CSS into scoped, deduplicated stylesheets."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# Import and register subcommands
from stylescope.cli.check import check  # noqa: E402
from stylescope.cli.compile import compile_command  # noqa: E402
from stylescope.cli.inspect import inspect  # noqa: E402

cli.add_command(compile_command)
cli.add_command(check)
cli.add_command(inspect)
