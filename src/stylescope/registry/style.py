"""Style: the compiled, shared handle returned to callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stylescope.model.diagnostic import Diagnostic

if TYPE_CHECKING:
    from stylescope.registry.registry import StyleRegistry


@dataclass(eq=False)
class Style:
    """A compiled style shared by every caller that compiled the same input.

    Attach ``class_name`` to markup and hand ``css_text`` to whatever injects
    stylesheets. Each :meth:`register` (or compile call) must be balanced by
    one :meth:`unregister`; using the style as a context manager does this
    automatically.

    Attributes:
        class_name: Generated scope class, stable for identical input.
        css_text: Canonical serialized stylesheet.
        fingerprint: Registry key for this style.
        is_global: True if selectors were not qualified by ``class_name``.
        warnings: Non-fatal diagnostics, such as dangling declarations.
        ref_count: Number of outstanding holders; maintained by the registry.
    """

    class_name: str
    css_text: str
    fingerprint: str
    is_global: bool = False
    warnings: tuple[Diagnostic, ...] = ()
    ref_count: int = 0
    registry: StyleRegistry | None = field(default=None, repr=False)

    def register(self) -> Style:
        """Take one more reference to this style."""
        self._registry().acquire(self)
        return self

    def unregister(self) -> None:
        """Release one reference; the last release evicts the style."""
        self._registry().unregister(self)

    def _registry(self) -> StyleRegistry:
        if self.registry is None:
            raise RuntimeError(f"style {self.class_name} is not attached to a registry")
        return self.registry

    def __enter__(self) -> Style:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.unregister()

    def __str__(self) -> str:
        return self.class_name
