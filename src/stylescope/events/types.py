"""Event types emitted by the style registry for the host layer."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StyleRegistered:
    """A style gained its first holder; the host should inject ``css_text``."""

    class_name: str
    css_text: str
    fingerprint: str


@dataclass(frozen=True)
class StyleUnregistered:
    """A style lost its last holder; the host should remove its stylesheet."""

    class_name: str
    fingerprint: str
