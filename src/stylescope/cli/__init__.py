from stylescope.cli.main import cli

__all__ = ["cli"]
