"""Process-wide, deduplicating style registry.

Every distinct (normalized source, placeholder values, global flag) input is
compiled at most once; later compiles of the same input share the cached
:class:`Style` and bump its reference count. Lookup-or-compile and every
reference count change happen under one lock, so concurrent first requests
for the same style never compile it twice and a release never races a fresh
acquire.
"""

from __future__ import annotations

import logging
import threading

from stylescope.config import RegistryConfig
from stylescope.events.bus import EventBus
from stylescope.events.types import StyleRegistered, StyleUnregistered
from stylescope.model.diagnostic import Diagnostic
from stylescope.parser.errors import StyleError
from stylescope.parser.parser import parse_sheet
from stylescope.registry.fingerprint import class_name_for, fingerprint
from stylescope.registry.style import Style
from stylescope.stylesheet.serializer import serialize
from stylescope.transforms import Transform, apply_transforms, scope_sheet
from stylescope.transforms.placeholder_expansion import PlaceholderValues

logger = logging.getLogger(__name__)


class StyleRegistry:
    """Cache of compiled styles keyed by content fingerprint.

    Lifecycle notifications go through :attr:`bus`: ``StyleRegistered`` when
    a style gains its first holder and ``StyleUnregistered`` when it loses
    its last one. Each change is published before the next one starts, so
    a host never sees a release after the re-registration that followed it.
    """

    def __init__(
        self,
        config: RegistryConfig | None = None,
        bus: EventBus | None = None,
        transforms: list[Transform] | None = None,
    ) -> None:
        self.config = config or RegistryConfig()
        self.bus = bus or EventBus()
        self._transforms = list(transforms or [])
        self._lock = threading.Lock()
        # Held from a state change until its event is published, so hosts see
        # events in the order the changes happened. Reentrant for listeners.
        self._publish_lock = threading.RLock()
        self._styles: dict[str, Style] = {}

    # --- compile / release ----------------------------------------------------

    def compile(
        self,
        source: str,
        values: PlaceholderValues | None = None,
        *,
        is_global: bool = False,
    ) -> Style:
        """Return the shared style for *source*, compiling it on first use.

        Raises:
            TokenError, ParseError, InterpolationError: if the source does not
                compile. Failures are not cached.
        """
        key = fingerprint(source, values, is_global)
        with self._publish_lock:
            with self._lock:
                style = self._styles.get(key)
                if style is None:
                    style = self._build(source, values, is_global, key)
                    self._styles[key] = style
                    logger.debug("compiled style %s", style.class_name)
                else:
                    logger.debug("reusing style %s (refs=%d)", style.class_name, style.ref_count)
                first = self._acquire_locked(style)
            if first:
                self.bus.emit(StyleRegistered(style.class_name, style.css_text, style.fingerprint))
        return style

    def acquire(self, style: Style) -> None:
        """Take another reference to an already compiled *style*."""
        with self._publish_lock:
            with self._lock:
                current = self._styles.get(style.fingerprint)
                if current is None:
                    # Evicted earlier; the compiled text is still valid.
                    self._styles[style.fingerprint] = style
                elif current is not style:
                    raise StyleError(f"style {style.class_name} was replaced by a newer compile")
                first = self._acquire_locked(style)
            if first:
                self.bus.emit(StyleRegistered(style.class_name, style.css_text, style.fingerprint))

    def unregister(self, style: Style) -> None:
        """Release one reference to *style*, evicting it at zero."""
        with self._publish_lock:
            with self._lock:
                if self._styles.get(style.fingerprint) is not style or style.ref_count == 0:
                    logger.warning("ignoring release of unregistered style %s", style.class_name)
                    return
                style.ref_count -= 1
                released = style.ref_count == 0
                if released and not self.config.retain_unused:
                    del self._styles[style.fingerprint]
                    logger.debug("evicted style %s", style.class_name)
            if released:
                self.bus.emit(StyleUnregistered(style.class_name, style.fingerprint))

    def _acquire_locked(self, style: Style) -> bool:
        style.ref_count += 1
        return style.ref_count == 1

    def _build(
        self, source: str, values: PlaceholderValues | None, is_global: bool, key: str
    ) -> Style:
        sheet = parse_sheet(source)
        sheet = apply_transforms(sheet, values, self._transforms)
        class_name = class_name_for(key, self.config.class_prefix, self.config.hash_length)
        items = scope_sheet(sheet, None if is_global else class_name)
        return Style(
            class_name=class_name,
            css_text=serialize(items, indent=self.config.indent),
            fingerprint=key,
            is_global=is_global,
            warnings=tuple(Diagnostic.from_dangling(d) for d in sheet.dangling_declarations()),
            registry=self,
        )

    # --- inspection -----------------------------------------------------------

    def get(self, key: str) -> Style | None:
        """Look up a cached style by fingerprint."""
        with self._lock:
            return self._styles.get(key)

    def styles(self) -> list[Style]:
        """Return all cached styles in insertion order."""
        with self._lock:
            return list(self._styles.values())

    def clear(self) -> None:
        """Drop every cached style without notifying listeners."""
        with self._lock:
            self._styles.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._styles)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, Style):
            key = key.fingerprint
        with self._lock:
            return key in self._styles


_default_registry: StyleRegistry | None = None
_default_lock = threading.Lock()


def get_registry() -> StyleRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = StyleRegistry()
        return _default_registry


def reset_registry(config: RegistryConfig | None = None) -> StyleRegistry:
    """Replace the process-wide registry with an empty one."""
    global _default_registry
    with _default_lock:
        _default_registry = StyleRegistry(config)
        return _default_registry


def compile_style(
    source: str,
    values: PlaceholderValues | None = None,
    *,
    is_global: bool = False,
) -> Style:
    """Compile *source* through the process-wide registry."""
    return get_registry().compile(source, values, is_global=is_global)
