from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RegistryConfig:
    class_prefix: str = "stylescope"
    hash_length: int = 8  # characters of the fingerprint kept in class names
    retain_unused: bool = False  # keep styles cached after their last release
    indent: str = "  "
