"""Stylescope -- compile nested, interpolated CSS into scoped, deduplicated stylesheets."""

__version__ = "0.1.0"

from stylescope.config import RegistryConfig  # noqa: E402
from stylescope.parser import InterpolationError, ParseError, StyleError, TokenError, parse_sheet  # noqa: E402
from stylescope.registry import (  # noqa: E402
    Style,
    StyleRegistry,
    compile_style,
    get_registry,
    reset_registry,
)

__all__ = [
    "__version__",
    "RegistryConfig",
    "Style",
    "StyleRegistry",
    "compile_style",
    "get_registry",
    "reset_registry",
    "parse_sheet",
    "StyleError",
    "TokenError",
    "ParseError",
    "InterpolationError",
]
