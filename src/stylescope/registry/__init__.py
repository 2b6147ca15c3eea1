"""Style registry: fingerprinting, shared style handles and the default registry."""

from stylescope.registry.fingerprint import class_name_for, fingerprint, normalize_source
from stylescope.registry.registry import (
    StyleRegistry,
    compile_style,
    get_registry,
    reset_registry,
)
from stylescope.registry.style import Style

__all__ = [
    "Style",
    "StyleRegistry",
    "compile_style",
    "get_registry",
    "reset_registry",
    "fingerprint",
    "normalize_source",
    "class_name_for",
]
